import re
from pathlib import Path, PurePosixPath
from typing import Optional, Tuple
from uuid import uuid4

import filetype

from videoreview.core.errors import RangeNotSatisfiableError, ValidationError

VIDEO_MIME_PREFIX = "video/"
DEFAULT_VIDEO_MIME = "video/mp4"

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


def validate_upload_meta(
    filename: Optional[str],
    size: Optional[int],
    content_type: Optional[str],
    *,
    max_bytes: int,
) -> None:
    """
    Contrôles dans l'ordre, chacun avec son propre message :
    nom/taille/type présents, type vidéo, taille maximale.
    Lève ValidationError si invalide.
    """
    if not filename or not size or not content_type:
        raise ValidationError("Invalid file", details="File must have a name, a size and a type")
    if not content_type.startswith(VIDEO_MIME_PREFIX):
        raise ValidationError("Invalid file type", details="File must be a video")
    if size > max_bytes:
        raise ValidationError("File too large", details=f"Maximum size is {max_bytes} bytes")


def build_stored_name(original_name: str) -> str:
    """
    <uuid>-<nom d'origine> : unique, mais le nom reste lisible sur le disque.
    Seul le nom de base est gardé (pas de séparateurs venant du client).
    """
    base = PurePosixPath(original_name.replace("\\", "/")).name or "video"
    return f"{uuid4()}-{base}"


def relative_upload_path(uploads_dirname: str, *parts: str) -> str:
    """Chemin relatif (séparateur "/") tel qu'enregistré dans file_path."""
    return "/".join((uploads_dirname,) + parts)


def resolve_under_root(root: Path, relative: str) -> Optional[Path]:
    """
    Résout `relative` sous `root` ; None si le chemin sort de la racine
    (segments "..", chemin absolu, lien symbolique vers l'extérieur).
    """
    root = root.resolve()
    candidate = (root / relative.lstrip("/")).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate


def detect_mime(path: Path, default: str = DEFAULT_VIDEO_MIME) -> str:
    """Type réel d'après l'en-tête du fichier via 'filetype'."""
    kind = filetype.guess(str(path))
    if kind is None or not kind.mime.startswith(VIDEO_MIME_PREFIX):
        return default
    return kind.mime


def parse_range(header: str, size: int) -> Tuple[int, int]:
    """
    Interprète "bytes=start-end" (end optionnel) ou "bytes=-N" (N derniers octets).
    Retourne (start, end) inclusifs ; end est borné à size - 1.
    """
    match = _RANGE_RE.match(header.strip())
    if not match or (not match.group(1) and not match.group(2)):
        raise RangeNotSatisfiableError("Invalid range", file_size=size, details=header)

    first, last = match.groups()
    if first:
        start = int(first)
        end = int(last) if last else size - 1
    else:
        suffix = int(last)
        if suffix == 0:
            raise RangeNotSatisfiableError("Range not satisfiable", file_size=size, details=header)
        start = max(size - suffix, 0)
        end = size - 1

    end = min(end, size - 1)
    if start >= size or start > end:
        raise RangeNotSatisfiableError("Range not satisfiable", file_size=size, details=header)
    return start, end
