"""
Liste les fichiers sous STORAGE_ROOT/uploads qu'aucune vidéo ni version ne référence
(upload interrompu, suppression partielle...). Avec --delete, les supprime.

    python -m scripts.reconcile_uploads [--delete]
"""

import argparse
import logging
from pathlib import Path
from typing import List, Set

from videoreview.core.config import Settings, settings
from videoreview.core.logging import configure_logging
from videoreview.db.repositories.video_versions import VideoVersionRepository
from videoreview.db.repositories.videos import VideoRepository
from videoreview.db.session import Database

logger = logging.getLogger("reconcile_uploads")


def referenced_paths(db: Database) -> Set[str]:
    with db.session() as session:
        paths = set(VideoRepository(session).all_file_paths())
        paths.update(VideoVersionRepository(session).all_file_paths())
    return paths


def find_orphans(settings: Settings, referenced: Set[str]) -> List[Path]:
    root = settings.storage_root
    uploads = root / settings.UPLOADS_DIRNAME
    if not uploads.is_dir():
        return []

    orphans = []
    for path in sorted(uploads.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(root).as_posix()
        if relative not in referenced:
            orphans.append(path)
    return orphans


def reconcile(settings: Settings, *, delete: bool = False) -> List[Path]:
    db = Database.from_settings(settings)
    db.init()
    try:
        orphans = find_orphans(settings, referenced_paths(db))
    finally:
        db.dispose()

    for path in orphans:
        if not delete:
            logger.info("Orphan file: %s", path)
            continue
        try:
            path.unlink()
            logger.info("Deleted orphan file: %s", path)
        except OSError as e:
            logger.warning("Unable to delete %s: %s", path, e)

    logger.info("%s orphan file(s)%s", len(orphans), " deleted" if delete else "")
    return orphans


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Fichiers uploadés sans ligne en base")
    parser.add_argument("--delete", action="store_true", help="supprimer les fichiers orphelins")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)
    reconcile(settings, delete=args.delete)
