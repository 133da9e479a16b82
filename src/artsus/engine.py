"""Game session orchestration: games, investigations, rounds and eliminations."""

from __future__ import annotations

import logging
import threading
import weakref

from artsus.config import Settings
from artsus.content.answers import AnswerGenerator, answer_for_round
from artsus.domain.enums import InvestigationOutcome, ModelOrder
from artsus.domain.models import AIModel, FinalScore, Game, Investigation, Player
from artsus.errors import Conflict, ValidationError
from artsus.investigation import ledger
from artsus.investigation.pool import choose_criminal, select_pool
from artsus.investigation.rounds import AnswerWaiter, record_answer, start_round
from artsus.persistence.db import GameStore
from artsus.util.rng import Rng

logger = logging.getLogger(__name__)


class GameEngine:
    """Entry point for callers such as a web layer or the terminal app.

    The store is injected and owned by the caller. Actions on one game are
    serialized by a per-game lock; different games never contend.
    """

    def __init__(
        self,
        store: GameStore,
        settings: Settings | None = None,
        rng: Rng | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or Settings()
        self.rng = rng or Rng(self.settings.seed)
        self.waiter = AnswerWaiter(
            store,
            poll_interval=self.settings.answer_poll_interval,
            timeout=self.settings.answer_timeout,
        )
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock(self, key: str) -> threading.Lock:
        # Entries vanish once no caller holds the lock.
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    # Games

    def new_game(self, player_uuid: str, model: str, player_name: str | None = None) -> Game:
        if not model:
            raise ValidationError("model must not be empty")
        if not player_uuid:
            logger.warning("Creating a game without a player uuid")
        game = Game(
            investigator=Player(
                uuid=player_uuid, name=player_name or self.settings.default_player_name
            ),
            model=model,
        )
        with self.store.transaction():
            self.store.save_game(game)
            self._new_investigation(game.uuid)
        logger.info("New game %s for player %s using %s", game.uuid, player_uuid, model)
        return self._load(game)

    def current_game(self, player_uuid: str) -> Game:
        if not player_uuid:
            raise ValidationError("player uuid must not be empty")
        with self._lock(f"player:{player_uuid}"):
            game = self.store.latest_game(player_uuid)
            if game is None:
                logger.warning("No game for player %s, starting one", player_uuid)
                return self.new_game(player_uuid, self.settings.default_model)
        return self._load(game)

    def _load(self, game: Game) -> Game:
        stored = self.store.get_game(game.uuid)
        investigation = ledger.refresh(self.store.latest_investigation(game.uuid))
        return stored.model_copy(
            update={
                "investigation": investigation,
                "level": self.store.count_investigations(game.uuid),
                "game_over": ledger.is_game_over(investigation),
            }
        )

    # Investigations and rounds

    def _new_investigation(self, game_uuid: str) -> Investigation:
        pool = select_pool(self.store.all_suspects(), self.settings.pool_size, self.rng)
        position = choose_criminal(pool, self.rng)
        investigation = Investigation(
            game_uuid=game_uuid, suspects=pool, criminal_uuid=pool[position].uuid
        )
        with self.store.transaction():
            self.store.save_investigation(investigation)
            investigation.rounds.append(start_round(self.store, investigation.uuid, self.rng))
        logger.debug("New investigation %s, criminal is no. %d", investigation.uuid, position + 1)
        return investigation

    def advance_investigation(self, player_uuid: str) -> Game:
        game = self.current_game(player_uuid)
        with self._lock(f"game:{game.uuid}"):
            game = self._load(game)
            if game.game_over:
                raise Conflict(f"game {game.uuid} is over")
            if game.investigation.outcome == InvestigationOutcome.OPEN:
                raise Conflict(f"investigation {game.investigation.uuid} is not solved yet")
            self._new_investigation(game.uuid)
            return self._load(game)

    def advance_round(self, player_uuid: str) -> Game:
        game = self.current_game(player_uuid)
        with self._lock(f"game:{game.uuid}"):
            game = self._load(game)
            if game.investigation.investigation_over:
                raise Conflict(f"investigation {game.investigation.uuid} is over")
            start_round(self.store, game.investigation.uuid, self.rng)
            return self._load(game)

    def eliminate_suspect(
        self, suspect_uuid: str, round_uuid: str, investigation_uuid: str
    ) -> ledger.EliminationResult:
        if not investigation_uuid:
            raise ValidationError("investigation uuid must not be empty")
        game_uuid = self.store.get_investigation(investigation_uuid).game_uuid
        with self._lock(f"game:{game_uuid}"):
            result = ledger.eliminate(self.store, suspect_uuid, round_uuid, investigation_uuid)
        if result.game_over:
            logger.info("Game %s is over", game_uuid)
        return result

    # Answers

    def record_answer(self, round_uuid: str, answer: str) -> str:
        return record_answer(self.store, round_uuid, answer, waiter=self.waiter)

    def wait_for_answer(
        self,
        round_uuid: str,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> str:
        return self.waiter.wait(round_uuid, timeout=timeout, cancel=cancel)

    def get_or_generate_answer(self, player_uuid: str, generator: AnswerGenerator) -> str:
        game = self.current_game(player_uuid)
        return answer_for_round(self.store, game, generator, waiter=self.waiter)

    # Scores and models

    def get_scores(self) -> list[FinalScore]:
        return [
            FinalScore(
                position=position,
                score=int(row["score"] or 0),
                investigator=row["investigator"] or "",
                game_uuid=row["uuid"],
                timestamp=row["timestamp"],
            )
            for position, row in enumerate(self.store.scores(), start=1)
        ]

    def save_score(self, player_name: str, game_uuid: str) -> None:
        if not player_name or not game_uuid:
            raise ValidationError("player name and game uuid are required")
        self.store.set_investigator(game_uuid, player_name)
        logger.info("Saved score of game %s as %s", game_uuid, player_name)

    def get_models(
        self, allowed_only: bool = False, order_by: ModelOrder | str = ModelOrder.ID
    ) -> list[AIModel]:
        try:
            order = ModelOrder(order_by or ModelOrder.ID)
        except ValueError as exc:
            raise ValidationError(f"cannot order models by {order_by!r}") from exc
        return self.store.list_models(allowed_only=allowed_only, order_by=order)
