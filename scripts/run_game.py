from __future__ import annotations

import argparse
import sys
from pathlib import Path
from uuid import uuid4

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from artsus.config import Settings
from artsus.domain.enums import InvestigationOutcome, SuspectStatus
from artsus.domain.models import Game
from artsus.engine import GameEngine
from artsus.errors import AnswerTimeout, ArtsusError
from artsus.persistence.catalogue import load_catalogue, seed_catalogue
from artsus.persistence.db import GameStore
from artsus.util.log import configure_logging
from artsus.util.rng import Rng


def _print_suspects(game: Game) -> None:
    for number, suspect in enumerate(game.investigation.suspects, start=1):
        if suspect.status == SuspectStatus.NEITHER:
            print(f"{number:>2}) {suspect.image}")
        else:
            print(f"{number:>2}) {suspect.image} ({suspect.status.value})")


def _print_round(game: Game) -> None:
    round_ = game.investigation.current_round
    print(
        f"Level {game.level}, score {game.score}. "
        f"Round {len(game.investigation.rounds)}: {round_.question.english}"
    )


def _answer(engine: GameEngine, game: Game, generator) -> None:
    try:
        if generator is not None:
            answer = engine.get_or_generate_answer(game.investigator.uuid, generator)
        else:
            answer = engine.wait_for_answer(game.investigation.current_round.uuid)
    except AnswerTimeout:
        print("No answer arrived in time.")
        return
    print(f"Witness says: {answer.upper()}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Play Artificial Suspects in the terminal.")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--player", type=str, default=None, help="Player uuid to resume.")
    parser.add_argument("--model", type=str, default=None)
    parser.add_argument("--db-path", type=str, default=None)
    parser.add_argument("--seed-catalogue", action="store_true")
    parser.add_argument(
        "--generate",
        action="store_true",
        help="Generate answers with the chat model (needs OPENAI_API_KEY).",
    )
    parser.add_argument("--log-level", type=str, default="WARNING")
    args = parser.parse_args()

    configure_logging(args.log_level)
    settings = Settings.from_env()
    if args.db_path:
        settings = settings.with_overrides(db_path=args.db_path)
    if args.seed is not None:
        settings = settings.with_overrides(seed=args.seed)
    store = GameStore(settings.db_path)
    if args.seed_catalogue:
        seed_catalogue(store, load_catalogue(settings.catalogue_path))

    generator = None
    if args.generate:
        from artsus.content.llm import ChatAnswerGenerator

        generator = ChatAnswerGenerator(settings, store)

    engine = GameEngine(store, settings, Rng(settings.seed))
    player_uuid = args.player or str(uuid4())
    if args.model:
        game = engine.new_game(player_uuid, args.model)
    else:
        game = engine.current_game(player_uuid)
    print(f"Player {player_uuid}, game {game.uuid}.")
    _print_round(game)

    while True:
        print("Commands: <number> eliminate, a answer, n next round, i next investigation, s suspects, q quit")
        choice = input("> ").strip().lower()
        if choice == "q":
            break
        try:
            if choice.isdigit():
                index = int(choice) - 1
                suspects = game.investigation.suspects
                if index < 0 or index >= len(suspects):
                    print("No suspect with that number.")
                    continue
                result = engine.eliminate_suspect(
                    suspects[index].uuid,
                    game.investigation.current_round.uuid,
                    game.investigation.uuid,
                )
                game = engine.current_game(player_uuid)
                if result.outcome == InvestigationOutcome.FAILED:
                    print(f"That was the criminal. Game over with score {game.score}.")
                    name = input("Name for the high score list: ").strip()
                    if name:
                        engine.save_score(name, game.uuid)
                    break
                print(f"Released. +{result.score_delta} points, score {game.score}.")
                if result.outcome == InvestigationOutcome.SOLVED:
                    print("Only the criminal is left. Type 'i' for the next investigation.")
            elif choice == "a":
                _answer(engine, game, generator)
            elif choice == "n":
                game = engine.advance_round(player_uuid)
                _print_round(game)
            elif choice == "i":
                game = engine.advance_investigation(player_uuid)
                _print_round(game)
            elif choice == "s":
                _print_suspects(game)
            else:
                print("Unknown command.")
        except ArtsusError as exc:
            print(f"Error: {exc}")

    for entry in engine.get_scores()[:10]:
        print(f"{entry.position:>2}. {entry.investigator or 'anonymous'}: {entry.score}")
    store.close()


if __name__ == "__main__":
    main()
