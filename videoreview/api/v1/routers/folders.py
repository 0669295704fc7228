from typing import List

from fastapi import APIRouter, Depends

from videoreview.api.v1.dependencies import get_folder_service
from videoreview.features.folders.schemas import FolderCreateIn, FolderOut, FolderUpdateIn
from videoreview.features.folders.services import FolderService
from videoreview.features.projects.schemas import SuccessOut

router = APIRouter(
    prefix="/projects/{project_id}/folders",
    tags=["folders"],
    responses={403: {"description": "Folder belongs to another project"}, 404: {"description": "Not Found"}},
)


@router.get("", summary="Lister les dossiers d'un projet", response_model=List[FolderOut])
def list_folders(project_id: str, svc: FolderService = Depends(get_folder_service)):
    return svc.list(project_id)


@router.post("", summary="Créer un dossier (nom unique dans le projet)", response_model=FolderOut)
def create_folder(
    project_id: str,
    payload: FolderCreateIn,
    svc: FolderService = Depends(get_folder_service),
):
    return svc.create(project_id, payload)


@router.get("/{folder_id}", summary="Obtenir un dossier", response_model=FolderOut)
def get_folder(project_id: str, folder_id: str, svc: FolderService = Depends(get_folder_service)):
    return svc.get_one(project_id, folder_id)


@router.put("/{folder_id}", summary="Renommer un dossier", response_model=FolderOut)
def rename_folder(
    project_id: str,
    folder_id: str,
    payload: FolderUpdateIn,
    svc: FolderService = Depends(get_folder_service),
):
    return svc.rename(project_id, folder_id, payload)


@router.delete("/{folder_id}", summary="Supprimer un dossier et tout son contenu", response_model=SuccessOut)
def delete_folder(project_id: str, folder_id: str, svc: FolderService = Depends(get_folder_service)):
    svc.delete(project_id, folder_id)
    return SuccessOut()
