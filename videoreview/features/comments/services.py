import json
import logging
from typing import Dict, List, Optional

from videoreview.core.errors import NotFoundError, ValidationError
from videoreview.db.models.comments import Comment
from videoreview.db.repositories.comments import CommentRepository
from videoreview.db.repositories.video_versions import VideoVersionRepository
from videoreview.db.repositories.videos import VideoRepository
from videoreview.features.comments.schemas import CommentCreateIn, CommentOut, CommentUpdateIn
from videoreview.utils.drawings import dump_drawing, load_drawing, normalize_drawing_data, normalize_video_time

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Anonymous"
DEFAULT_EMAIL = "anonymous@example.com"


def _load_liked_by(raw: Optional[str]) -> List[str]:
    try:
        emails = json.loads(raw) if raw else []
    except ValueError:
        logger.warning("Unreadable liked_by value reset: %.60s", raw)
        return []
    if not isinstance(emails, list):
        return []
    # ensemble ordonné : pas de doublon, ordre d'ajout conservé
    return list(dict.fromkeys(e for e in emails if isinstance(e, str)))


class CommentService:
    """
    Commentaires horodatés d'une vidéo.
    - Liste : une requête plate puis reconstruction de l'arbre (parent_id) en mémoire.
    - Réponse : hérite projet/dossier/vidéo/version du parent, quoi qu'envoie le client.
    - Like : bascule l'email dans liked_by, likes suit.
    """

    def __init__(
        self,
        *,
        repo: CommentRepository,
        video_repo: VideoRepository,
        version_repo: VideoVersionRepository,
    ):
        self.comments = repo
        self.videos = video_repo
        self.versions = version_repo

    # --------------- Helpers ---------------
    def _to_out(self, entity: Comment) -> CommentOut:
        return CommentOut(
            id=entity.id,
            project_id=entity.project_id,
            folder_id=entity.folder_id,
            video_id=entity.video_id,
            version_id=entity.version_id,
            parent_id=entity.parent_id,
            user_name=entity.user_name,
            user_email=entity.user_email,
            text=entity.text or "",
            video_time=normalize_video_time(entity.video_time),
            drawing_data=load_drawing(entity.drawing_data, entity.video_time),
            likes=max(entity.likes or 0, 0),
            liked_by=_load_liked_by(entity.liked_by),
            resolved=bool(entity.resolved),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            replies=[],
        )

    def _get_or_404(self, comment_id: str) -> Comment:
        entity = self.comments.get(comment_id)
        if not entity:
            raise NotFoundError("Comment not found")
        return entity

    # --------------- Queries ---------------
    def list_tree(
        self,
        project_id: str,
        folder_id: str,
        video_id: str,
        *,
        version_id: Optional[str] = None,
    ) -> List[CommentOut]:
        """
        Forêt de commentaires, ordre de création conservé à chaque niveau.
        Une réponse dont le parent est absent du résultat est écartée (et journalisée).
        """
        rows = self.comments.list_for_video(project_id, folder_id, video_id, version_id=version_id)

        nodes: Dict[str, CommentOut] = {}
        for row in rows:
            nodes[row.id] = self._to_out(row)

        roots: List[CommentOut] = []
        for node in nodes.values():
            if not node.parent_id:
                roots.append(node)
                continue
            parent = nodes.get(node.parent_id)
            if parent is None:
                logger.warning("Comment %s dropped: parent %s not found", node.id, node.parent_id)
                continue
            parent.replies.append(node)
        return roots

    def get_one(self, comment_id: str) -> CommentOut:
        return self._to_out(self._get_or_404(comment_id))

    # --------------- Commands ---------------
    def create(self, project_id: str, folder_id: str, video_id: str, payload: CommentCreateIn) -> CommentOut:
        if not payload.text and not payload.drawing:
            raise ValidationError("Invalid data", details="A comment needs a text or a drawing")

        version_id = payload.version_id
        if payload.parent_id:
            parent = self.comments.get(payload.parent_id)
            if not parent:
                raise NotFoundError("Parent comment not found")
            # une réponse reste toujours sur la vidéo de son parent
            project_id, folder_id, video_id = parent.project_id, parent.folder_id, parent.video_id
            version_id = parent.version_id
        else:
            video = self.videos.get(video_id)
            if not video or video.project_id != project_id or video.folder_id != folder_id:
                raise NotFoundError("Video not found")
            if version_id:
                version = self.versions.get(version_id)
                if not version or version.video_id != video_id:
                    raise NotFoundError("Version not found")

        video_time = normalize_video_time(payload.video_time)
        drawing = normalize_drawing_data(payload.drawing, video_time)

        entity = self.comments.create(
            project_id=project_id,
            folder_id=folder_id,
            video_id=video_id,
            version_id=version_id,
            parent_id=payload.parent_id or None,
            user_name=payload.author or DEFAULT_AUTHOR,
            user_email=payload.email or DEFAULT_EMAIL,
            text=payload.text or "",
            video_time=video_time,
            drawing_data=dump_drawing(drawing),
            likes=0,
            liked_by="[]",
            resolved=False,
        )
        return self._to_out(entity)

    def update(self, comment_id: str, payload: CommentUpdateIn) -> CommentOut:
        if not payload.text:
            raise ValidationError("Comment text is required")
        entity = self._get_or_404(comment_id)

        changes = {"text": payload.text}
        fields = payload.model_fields_set
        if "drawing" in fields:
            changes["drawing_data"] = dump_drawing(normalize_drawing_data(payload.drawing, entity.video_time))
        if payload.resolved is not None:
            changes["resolved"] = payload.resolved

        return self._to_out(self.comments.update(entity, **changes))

    def delete(self, comment_id: str) -> None:
        """Supprime le commentaire et toutes ses réponses, en une transaction."""
        self._get_or_404(comment_id)
        ids = self.comments.descendant_ids(comment_id) + [comment_id]
        self.comments.delete_where(Comment.id.in_(ids))

    def toggle_like(self, comment_id: str, email: str) -> Optional[CommentOut]:
        """
        Ajoute ou retire `email` de liked_by ; appliqué deux fois, revient à l'état initial.
        None si le commentaire n'existe pas.
        """
        entity = self.comments.get(comment_id)
        if not entity:
            return None

        liked_by = _load_liked_by(entity.liked_by)
        likes = max(entity.likes or 0, 0)
        if email in liked_by:
            liked_by.remove(email)
            likes = max(likes - 1, 0)
        else:
            liked_by.append(email)
            likes += 1

        self.comments.set_likes(comment_id, likes=likes, liked_by=json.dumps(liked_by))
        return self._to_out(self.comments.refresh(entity))
