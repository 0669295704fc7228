from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from videoreview.api.v1.dependencies import get_comment_service
from videoreview.core.errors import NotFoundError, ValidationError
from videoreview.features.comments.schemas import (
    CommentCreateIn,
    CommentLikeIn,
    CommentOut,
    CommentUpdateIn,
)
from videoreview.features.comments.services import CommentService
from videoreview.features.projects.schemas import SuccessOut

router = APIRouter(
    prefix="/projects/{project_id}/folders/{folder_id}/videos/{video_id}/comments",
    tags=["comments"],
    responses={404: {"description": "Not Found"}},
)


@router.get("", summary="Lister les commentaires (arbre de réponses)", response_model=List[CommentOut])
def list_comments(
    project_id: str,
    folder_id: str,
    video_id: str,
    version_id: Optional[str] = Query(None, description="Limiter aux commentaires d'une version"),
    svc: CommentService = Depends(get_comment_service),
):
    return svc.list_tree(project_id, folder_id, video_id, version_id=version_id)


@router.post("", summary="Ajouter un commentaire ou une réponse", response_model=CommentOut)
def create_comment(
    project_id: str,
    folder_id: str,
    video_id: str,
    payload: CommentCreateIn,
    svc: CommentService = Depends(get_comment_service),
):
    return svc.create(project_id, folder_id, video_id, payload)


@router.put("/{comment_id}", summary="Modifier le texte / dessin / résolution", response_model=CommentOut)
def update_comment(
    comment_id: str,
    payload: CommentUpdateIn,
    svc: CommentService = Depends(get_comment_service),
):
    return svc.update(comment_id, payload)


@router.delete("/{comment_id}", summary="Supprimer un commentaire et ses réponses", response_model=SuccessOut)
def delete_comment(comment_id: str, svc: CommentService = Depends(get_comment_service)):
    svc.delete(comment_id)
    return SuccessOut()


@router.post("/{comment_id}/like", summary="Aimer / ne plus aimer un commentaire", response_model=CommentOut)
def toggle_like(
    comment_id: str,
    payload: CommentLikeIn,
    svc: CommentService = Depends(get_comment_service),
):
    if not payload.email:
        raise ValidationError("User email is required")
    comment = svc.toggle_like(comment_id, payload.email)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment
