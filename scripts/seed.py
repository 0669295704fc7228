"""
Charge des projets / dossiers / vidéos de démonstration depuis un YAML.

    python -m scripts.seed scripts/seed_data.yaml
"""

import argparse

from videoreview.core.config import settings
from videoreview.core.logging import configure_logging
from videoreview.db.seed import seed_all
from videoreview.db.session import Database


def run_seed(seed_path: str) -> None:
    db = Database.from_settings(settings)
    db.init()
    settings.storage_root.mkdir(parents=True, exist_ok=True)
    try:
        with db.session() as session:
            seed_all(session=session, settings=settings, seed_path=seed_path)
    finally:
        db.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed de la base de revue vidéo")
    parser.add_argument("seed_path", nargs="?", default="scripts/seed_data.yaml")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)
    run_seed(args.seed_path)
