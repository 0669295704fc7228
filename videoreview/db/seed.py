import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from sqlmodel import Session

from videoreview.core.config import Settings
from videoreview.core.errors import ReviewError
from videoreview.db.repositories.comments import CommentRepository
from videoreview.db.repositories.folders import FolderRepository
from videoreview.db.repositories.projects import ProjectRepository
from videoreview.db.repositories.video_versions import VideoVersionRepository
from videoreview.db.repositories.videos import VideoRepository
from videoreview.features.folders.schemas import FolderCreateIn
from videoreview.features.folders.services import FolderService
from videoreview.features.media.services import IncomingFile, LocalStorage, UploadIngestor
from videoreview.features.projects.schemas import ProjectCreateIn
from videoreview.features.projects.services import ProjectService


# -----------------------------
# YAML loader
# -----------------------------
def load_seed_yaml(seed_path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed YAML introuvable: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Le YAML de seed doit contenir un objet racine (mapping).")
    return data


# -----------------------------
# Helpers
# -----------------------------
def _resolve_rel_path(seed_path: Path, rel_path: str) -> Path:
    """Les chemins du YAML sont relatifs au fichier YAML lui-même."""
    p = Path(rel_path)
    if p.is_absolute():
        return p
    return (seed_path.parent / p).resolve()


def _upload_video(ingestor: UploadIngestor, project_id: str, folder_id: str, path: Path) -> bool:
    if not path.exists():
        print(f"⚠️ Vidéo introuvable (ignorée): {path}")
        return False

    content_type, _ = mimetypes.guess_type(str(path))
    with path.open("rb") as fh:
        incoming = IncomingFile(
            filename=path.name,
            size=path.stat().st_size,
            content_type=content_type,
            stream=fh,
        )
        try:
            ingestor.ingest(project_id, folder_id, incoming)
        except ReviewError as e:
            print(f"⚠️ Upload vidéo refusé (ignorée): {path} : {e.message}")
            return False
    return True


# -----------------------------
# Seed Projects (+ dossiers, + vidéos)
# -----------------------------
def seed_projects(session: Session, settings: Settings, data: Dict[str, Any], seed_path: Path) -> None:
    """
    Seed idempotent : un projet déjà présent (même nom) est ignoré, avec tout son contenu.

    projects:
      - name: Démo
        description: ...
        folders:
          - name: Rushes
            videos: [clips/plan-1.mp4]
    """
    projects: List[Dict[str, Any]] = data.get("projects", [])
    if not projects:
        print("⚠️ Aucun projet dans le YAML (clé 'projects').")
        return

    storage = LocalStorage(
        settings.storage_root,
        uploads_dirname=settings.UPLOADS_DIRNAME,
        fallback_dir=settings.FALLBACK_UPLOAD_DIR,
        chunk_size=settings.STREAM_CHUNK_SIZE,
    )
    project_repo = ProjectRepository(session)
    folder_repo = FolderRepository(session)
    video_repo = VideoRepository(session)
    version_repo = VideoVersionRepository(session)
    comment_repo = CommentRepository(session)

    project_svc = ProjectService(
        repo=project_repo, folder_repo=folder_repo, video_repo=video_repo,
        version_repo=version_repo, comment_repo=comment_repo, storage=storage,
    )
    folder_svc = FolderService(
        repo=folder_repo, project_repo=project_repo, video_repo=video_repo,
        version_repo=version_repo, comment_repo=comment_repo, storage=storage,
    )
    ingestor = UploadIngestor(
        storage=storage, folder_repo=folder_repo, video_repo=video_repo,
        version_repo=version_repo, max_bytes=settings.max_upload_bytes,
    )

    inserted = 0
    skipped_existing = 0
    uploaded = 0

    for p in projects:
        name = p["name"]
        if project_repo.get_by_name(name):
            skipped_existing += 1
            continue

        project = project_svc.create(ProjectCreateIn(name=name, description=p.get("description")))
        inserted += 1

        for f in p.get("folders", []):
            folder = folder_svc.create(project.id, FolderCreateIn(name=f["name"]))
            for rel in f.get("videos", []):
                if _upload_video(ingestor, project.id, folder.id, _resolve_rel_path(seed_path, rel)):
                    uploaded += 1

    print(
        f"✅ Projets insérés: {inserted} | ignorés (existants): {skipped_existing} "
        f"| vidéos uploadées: {uploaded}"
    )


def seed_all(session: Session, settings: Settings, seed_path: Union[str, Path]) -> None:
    path = Path(seed_path)
    data = load_seed_yaml(path)
    seed_projects(session, settings, data, path)
    print("🎉 Seed terminé.")
