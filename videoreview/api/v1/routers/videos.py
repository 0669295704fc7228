from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from videoreview.api.v1.dependencies import (
    VersionPayload,
    get_version_service,
    get_video_service,
    read_version_payload,
)
from videoreview.features.media.services import IncomingFile
from videoreview.features.projects.schemas import SuccessOut
from videoreview.features.videos.schemas import (
    VersionUpdateIn,
    VideoInfoOut,
    VideoOut,
    VideoStatusOut,
    VideoStatusPatchIn,
    VideoStatusPutIn,
    VideoUpdateIn,
    VideoVersionOut,
    VideoWithVersionsOut,
)
from videoreview.features.videos.services import VersionService, VideoService

router = APIRouter(
    prefix="/projects/{project_id}/folders/{folder_id}/videos",
    tags=["videos"],
    responses={404: {"description": "Not Found"}},
)

# /videos/{id}/info : accès direct par id, sans connaître projet/dossier
info_router = APIRouter(prefix="/videos", tags=["videos"])


# -----------------------------
# Vidéos
# -----------------------------
@router.get(
    "",
    summary="Lister les vidéos visibles du dossier, avec leurs versions",
    response_model=List[VideoWithVersionsOut],
)
def list_videos(project_id: str, folder_id: str, svc: VideoService = Depends(get_video_service)):
    return svc.list_with_versions(project_id, folder_id)


@router.post(
    "",
    summary="Uploader une vidéo (multipart, champ 'file')",
    description="Écrit le fichier sous uploads/{project}/{folder}/ puis enregistre ses métadonnées.",
    status_code=status.HTTP_201_CREATED,
    response_model=VideoOut,
)
def upload_video(
    project_id: str,
    folder_id: str,
    file: Optional[UploadFile] = File(None),
    svc: VideoService = Depends(get_video_service),
):
    incoming = IncomingFile.from_upload(file) if file is not None else None
    return svc.upload(project_id, folder_id, incoming)


@router.get("/{video_id}", summary="Obtenir une vidéo (même cachée)", response_model=VideoOut)
def get_video(video_id: str, svc: VideoService = Depends(get_video_service)):
    return svc.get_one(video_id)


@router.put("/{video_id}", summary="Mettre à jour nom / durée", response_model=VideoOut)
def update_video(video_id: str, payload: VideoUpdateIn, svc: VideoService = Depends(get_video_service)):
    return svc.update_metadata(video_id, payload)


@router.patch("/{video_id}", summary="Changer le statut de revue", response_model=VideoOut)
def patch_video_status(
    video_id: str,
    payload: VideoStatusPatchIn,
    svc: VideoService = Depends(get_video_service),
):
    return svc.set_status(video_id, payload.video_status)


@router.delete(
    "/{video_id}",
    summary="Supprimer une vidéo, ses versions, ses commentaires et ses fichiers",
    response_model=SuccessOut,
)
def delete_video(video_id: str, svc: VideoService = Depends(get_video_service)):
    svc.delete(video_id)
    return SuccessOut()


@router.get("/{video_id}/status", summary="État de traitement et statut de revue", response_model=VideoStatusOut)
def get_video_status(video_id: str, svc: VideoService = Depends(get_video_service)):
    return svc.status(video_id)


@router.put("/{video_id}/status", summary="Changer le statut de revue", response_model=VideoOut)
def put_video_status(
    video_id: str,
    payload: VideoStatusPutIn,
    svc: VideoService = Depends(get_video_service),
):
    return svc.set_status(video_id, payload.status)


# -----------------------------
# Versions
# -----------------------------
@router.get(
    "/{video_id}/versions",
    summary="Lister les versions (plus récentes d'abord)",
    response_model=List[VideoVersionOut],
)
def list_versions(video_id: str, svc: VersionService = Depends(get_version_service)):
    return svc.list(video_id)


@router.post(
    "/{video_id}/versions",
    summary="Créer une version (upload multipart OU JSON {sourceVideoId})",
    description=(
        "Avec sourceVideoId, aucune copie de fichier : la version pointe vers le fichier "
        "de la vidéo source, qui est ensuite cachée du listing (irréversible)."
    ),
    status_code=status.HTTP_201_CREATED,
    response_model=VideoVersionOut,
)
def create_version(
    video_id: str,
    payload: VersionPayload = Depends(read_version_payload),
    svc: VersionService = Depends(get_version_service),
):
    if payload.source_video_id is not None:
        return svc.merge_existing(video_id, payload.source_video_id)
    return svc.create_from_upload(video_id, payload.file)


@router.put(
    "/{video_id}/versions/{version_id}",
    summary="Enregistrer la durée mesurée d'une version",
    response_model=VideoVersionOut,
)
def update_version(
    video_id: str,
    version_id: str,
    payload: VersionUpdateIn,
    svc: VersionService = Depends(get_version_service),
):
    return svc.update_duration(video_id, version_id, payload.duration)


# -----------------------------
# Infos par id
# -----------------------------
@info_router.get("/{video_id}/info", summary="Infos d'une vidéo (ids projet/dossier inclus)", response_model=VideoInfoOut)
def get_video_info(video_id: str, svc: VideoService = Depends(get_video_service)):
    return svc.get_one(video_id)
