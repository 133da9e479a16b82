from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from artsus import config
from artsus.persistence.catalogue import load_catalogue, seed_catalogue
from artsus.persistence.db import GameStore
from artsus.util.log import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Load the content catalogue into the game database.")
    parser.add_argument("--db-path", type=str, default=str(config.DB_PATH))
    parser.add_argument("--catalogue", type=str, default=str(config.CATALOGUE_PATH))
    parser.add_argument("--log-level", type=str, default="INFO")
    args = parser.parse_args()

    configure_logging(args.log_level)
    store = GameStore(Path(args.db_path))
    try:
        report = seed_catalogue(store, load_catalogue(Path(args.catalogue)))
    finally:
        store.close()
    print(
        f"Added {report.suspects} suspects, {report.questions} questions, "
        f"{report.descriptions} descriptions; {report.models} models and "
        f"{report.services} services refreshed."
    )


if __name__ == "__main__":
    main()
