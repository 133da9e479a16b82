from __future__ import annotations

import argparse
import sys
from pathlib import Path
from uuid import uuid4

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from artsus.config import Settings
from artsus.engine import GameEngine
from artsus.persistence.db import GameStore
from artsus.ui.app import SuspectsApp
from artsus.util.rng import Rng


def main() -> None:
    parser = argparse.ArgumentParser(description="Textual front end for Artificial Suspects.")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--player", type=str, default=None)
    parser.add_argument("--model", type=str, default=None, help="Start a new game with this model.")
    parser.add_argument("--db-path", type=str, default=None)
    parser.add_argument("--generate", action="store_true")
    args = parser.parse_args()

    settings = Settings.from_env()
    if args.db_path:
        settings = settings.with_overrides(db_path=args.db_path)
    store = GameStore(settings.db_path)
    generator = None
    if args.generate:
        from artsus.content.llm import ChatAnswerGenerator

        generator = ChatAnswerGenerator(settings, store)
    engine = GameEngine(store, settings, Rng(args.seed if args.seed is not None else settings.seed))
    app = SuspectsApp(
        engine,
        player_uuid=args.player or str(uuid4()),
        model=args.model,
        generator=generator,
    )
    try:
        app.run()
    finally:
        store.close()


if __name__ == "__main__":
    main()
