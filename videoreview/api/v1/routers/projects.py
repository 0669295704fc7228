from typing import List

from fastapi import APIRouter, Depends

from videoreview.api.v1.dependencies import get_project_service
from videoreview.features.projects.schemas import ProjectCreateIn, ProjectOut, ProjectUpdateIn, SuccessOut
from videoreview.features.projects.services import ProjectService

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
    responses={404: {"description": "Not Found"}},
)


@router.get("", summary="Lister les projets (plus récents d'abord)", response_model=List[ProjectOut])
def list_projects(svc: ProjectService = Depends(get_project_service)):
    return svc.list()


@router.post("", summary="Créer un projet", response_model=ProjectOut)
def create_project(payload: ProjectCreateIn, svc: ProjectService = Depends(get_project_service)):
    return svc.create(payload)


@router.get("/{project_id}", summary="Obtenir un projet", response_model=ProjectOut)
def get_project(project_id: str, svc: ProjectService = Depends(get_project_service)):
    return svc.get_one(project_id)


@router.put("/{project_id}", summary="Mettre à jour un projet", response_model=ProjectOut)
def update_project(
    project_id: str,
    payload: ProjectUpdateIn,
    svc: ProjectService = Depends(get_project_service),
):
    return svc.update(project_id, payload)


@router.delete(
    "/{project_id}",
    summary="Supprimer un projet (dossiers, vidéos, versions, commentaires et fichiers)",
    response_model=SuccessOut,
)
def delete_project(project_id: str, svc: ProjectService = Depends(get_project_service)):
    svc.delete(project_id)
    return SuccessOut()
