import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple

from fastapi import UploadFile

from videoreview.core.errors import NotFoundError, StorageError, ValidationError
from videoreview.db.models.video_versions import VideoVersion
from videoreview.db.models.videos import Video, VideoStatus
from videoreview.db.repositories.folders import FolderRepository
from videoreview.db.repositories.video_versions import VideoVersionRepository
from videoreview.db.repositories.videos import VideoRepository
from videoreview.utils.media_files import (
    build_stored_name,
    detect_mime,
    parse_range,
    relative_upload_path,
    resolve_under_root,
    validate_upload_meta,
)

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """Partie "file" d'un multipart, indépendante de Starlette."""
    filename: Optional[str]
    size: Optional[int]
    content_type: Optional[str]
    stream: BinaryIO

    @classmethod
    def from_upload(cls, upload: UploadFile) -> "IncomingFile":
        size = upload.size
        if size is None:
            # anciens Starlette : on mesure le fichier temporaire
            upload.file.seek(0, os.SEEK_END)
            size = upload.file.tell()
            upload.file.seek(0)
        return cls(
            filename=upload.filename,
            size=size,
            content_type=upload.content_type,
            stream=upload.file,
        )


class LocalStorage:
    """
    Fichiers vidéo sous STORAGE_ROOT.
    - save() écrit dans un fichier .part puis le renomme : jamais de fichier partiel sous son nom final.
    - mirror_to_fallback() : copie secondaire explicite vers FALLBACK_UPLOAD_DIR (échec = warning).
    """

    def __init__(
        self,
        root: Path,
        *,
        uploads_dirname: str = "uploads",
        fallback_dir: Optional[Path] = None,
        chunk_size: int = 1024 * 1024,
    ):
        self.root = Path(root).resolve()
        self.uploads_dirname = uploads_dirname
        self.fallback_dir = Path(fallback_dir) if fallback_dir else None
        self.chunk_size = chunk_size

    def resolve(self, relative: str) -> Optional[Path]:
        return resolve_under_root(self.root, relative)

    def exists(self, relative: str) -> bool:
        path = self.resolve(relative)
        return path is not None and path.is_file()

    def save(self, stream: BinaryIO, *parts: str, filename: str) -> Tuple[str, Path]:
        """Retourne (chemin relatif enregistré en DB, chemin absolu)."""
        relative = relative_upload_path(self.uploads_dirname, *parts, filename)
        target = self.resolve(relative)
        if target is None:
            raise ValidationError("Invalid upload location", details=relative)

        temp = target.with_name(target.name + ".part")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with temp.open("wb") as out:
                shutil.copyfileobj(stream, out, self.chunk_size)
            os.replace(temp, target)
        except OSError as e:
            temp.unlink(missing_ok=True)
            raise StorageError("Error saving file", details=str(e)) from e

        logger.info("Stored upload %s (%s bytes)", relative, target.stat().st_size)
        return relative, target

    def mirror_to_fallback(self, path: Path) -> None:
        if self.fallback_dir is None:
            return
        try:
            self.fallback_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, self.fallback_dir / path.name)
        except OSError as e:
            logger.warning("Fallback copy of %s failed: %s", path.name, e)

    def remove(self, relative: str) -> None:
        path = self.resolve(relative)
        if path is None or not path.is_file():
            return
        try:
            path.unlink()
        except OSError as e:
            logger.warning("Unable to remove %s: %s", relative, e)

    def remove_tree(self, *parts: str) -> None:
        path = self.resolve(relative_upload_path(self.uploads_dirname, *parts))
        if path is None or not path.is_dir():
            return
        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.warning("Unable to remove directory %s: %s", path, e)


class UploadIngestor:
    """
    Upload multipart → fichier sur disque → ligne Video / VideoVersion.
    Contrôles dans l'ordre : dossier existant, fichier présent, métadonnées, type vidéo, taille.
    Si l'insert échoue, le fichier écrit est supprimé.
    """

    def __init__(
        self,
        *,
        storage: LocalStorage,
        folder_repo: FolderRepository,
        video_repo: VideoRepository,
        version_repo: VideoVersionRepository,
        max_bytes: int,
    ):
        self.storage = storage
        self.folders = folder_repo
        self.videos = video_repo
        self.versions = version_repo
        self.max_bytes = max_bytes

    def _ensure_folder(self, project_id: str, folder_id: str) -> None:
        folder = self.folders.get(folder_id)
        if not folder or folder.project_id != project_id:
            raise NotFoundError("Folder not found")

    def _validate(self, file: Optional[IncomingFile]) -> IncomingFile:
        if file is None:
            raise ValidationError("File not found", details="No file was sent in the form data")
        validate_upload_meta(file.filename, file.size, file.content_type, max_bytes=self.max_bytes)
        return file

    def _store(self, file: IncomingFile, *parts: str) -> Tuple[str, Path]:
        relative, path = self.storage.save(file.stream, *parts, filename=build_stored_name(file.filename))
        self.storage.mirror_to_fallback(path)
        return relative, path

    def ingest(self, project_id: str, folder_id: str, file: Optional[IncomingFile]) -> Video:
        self._ensure_folder(project_id, folder_id)
        file = self._validate(file)
        relative, _ = self._store(file, project_id, folder_id)

        try:
            return self.videos.create(
                project_id=project_id,
                folder_id=folder_id,
                name=file.filename,
                file_path=relative,
                file_size=file.size,
                file_type=file.content_type,
                duration=None,  # mesurée par le client puis envoyée via PUT
                video_status=VideoStatus.NO_STATUS.value,
                is_hidden=False,
            )
        except Exception:
            self.storage.remove(relative)
            raise

    def ingest_version(self, video: Video, file: Optional[IncomingFile]) -> VideoVersion:
        file = self._validate(file)
        relative, _ = self._store(file, video.project_id, video.folder_id, video.id, "versions")

        try:
            return self.versions.create(
                project_id=video.project_id,
                folder_id=video.folder_id,
                video_id=video.id,
                source_video_id=video.id,
                file_path=relative,
                file_size=file.size,
                file_type=file.content_type,
                duration=None,
            )
        except Exception:
            self.storage.remove(relative)
            raise


@dataclass
class ByteWindow:
    path: Path
    start: int
    end: int
    size: int
    partial: bool
    media_type: str

    @property
    def length(self) -> int:
        return self.end - self.start + 1 if self.size else 0


class MediaStreamService:
    """Lecture d'un fichier sous la racine statique, avec prise en charge de l'en-tête Range."""

    def __init__(self, storage: LocalStorage, *, chunk_size: int = 1024 * 1024):
        self.storage = storage
        self.chunk_size = chunk_size

    def open_window(self, relative: str, range_header: Optional[str]) -> ByteWindow:
        path = self.storage.resolve(relative)
        if path is None or not path.is_file():
            raise NotFoundError("Error loading video", details=relative)

        size = path.stat().st_size
        media_type = detect_mime(path)
        if not range_header:
            return ByteWindow(path, 0, max(size - 1, 0), size, False, media_type)

        start, end = parse_range(range_header, size)
        return ByteWindow(path, start, end, size, True, media_type)

    def iter_bytes(self, window: ByteWindow) -> Iterator[bytes]:
        # le fichier n'est ouvert que pendant l'envoi de la réponse
        remaining = window.length
        with window.path.open("rb") as fh:
            fh.seek(window.start)
            while remaining > 0:
                chunk = fh.read(min(self.chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk
