from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import StreamingResponse

from videoreview.api.v1.dependencies import get_media_stream_service
from videoreview.features.media.services import MediaStreamService

# Monté hors de /api/v1 : les balises <video> pointent directement sur /videos/<file_path>
router = APIRouter(prefix="/videos", tags=["media"])


@router.get(
    "/{file_path:path}",
    summary="Lire un fichier vidéo (Range supporté)",
    responses={
        200: {"description": "Fichier complet"},
        206: {"description": "Plage d'octets"},
        404: {"description": "Fichier introuvable"},
        416: {"description": "Plage invalide"},
    },
)
def stream_video(
    file_path: str,
    range_header: Optional[str] = Header(None, alias="Range"),
    media: MediaStreamService = Depends(get_media_stream_service),
):
    window = media.open_window(file_path, range_header)

    headers = {
        "Accept-Ranges": "bytes",
        "Content-Length": str(window.length),
    }
    if window.partial:
        headers["Content-Range"] = f"bytes {window.start}-{window.end}/{window.size}"

    return StreamingResponse(
        media.iter_bytes(window),
        status_code=status.HTTP_206_PARTIAL_CONTENT if window.partial else status.HTTP_200_OK,
        media_type=window.media_type,
        headers=headers,
    )
