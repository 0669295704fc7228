import json
import logging
import math
from typing import Any, Dict, Mapping, Optional

from videoreview.core.errors import ValidationError

logger = logging.getLogger(__name__)

Drawing = Dict[str, Any]  # {"imageData": "data:image/png;base64,...", "timestamp": 12.5}


def _finite(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def normalize_video_time(value: Any) -> float:
    """Secondes finies et >= 0 ; toute autre entrée (NaN, inf, texte, négatif) devient 0."""
    number = _finite(value)
    if number is None or number < 0:
        return 0.0
    return number


def normalize_drawing_data(value: Any, video_time: Any = 0) -> Optional[Drawing]:
    """
    Ramène un dessin au format {"imageData", "timestamp"}.

    Accepte l'ancien format (data-URI nu), une chaîne JSON ou un objet.
    Le timestamp absent ou invalide prend la valeur de video_time.
    Idempotent : normalize(normalize(x)) == normalize(x).
    """
    if value is None or value == "":
        return None

    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            decoded = None
        if isinstance(decoded, Mapping):
            value = decoded
        else:
            # ancien format : la chaîne est l'image elle-même
            value = {"imageData": decoded if isinstance(decoded, str) else value}

    if not isinstance(value, Mapping):
        raise ValidationError("Invalid drawing", details="Drawing must be a data URI or an object")

    image = value.get("imageData")
    if not isinstance(image, str) or not image:
        raise ValidationError("Invalid drawing", details="Drawing must contain imageData")

    timestamp = _finite(value.get("timestamp"))
    if timestamp is None or timestamp < 0:
        timestamp = normalize_video_time(video_time)

    return {"imageData": image, "timestamp": timestamp}


def dump_drawing(drawing: Optional[Drawing]) -> Optional[str]:
    return json.dumps(drawing) if drawing is not None else None


def load_drawing(raw: Optional[str], video_time: Any = 0) -> Optional[Drawing]:
    """Lecture tolérante : les lignes anciennes peuvent contenir un data-URI nu."""
    try:
        return normalize_drawing_data(raw, video_time)
    except ValidationError:
        logger.warning("Unreadable drawing_data ignored: %.60s", raw)
        return None
