"""Round creation, answer recording and the bounded answer wait."""

from __future__ import annotations

import logging
import threading

from artsus import config
from artsus.domain.models import Round
from artsus.errors import AnswerTimeout, NotFound, ValidationError, WaitCancelled
from artsus.persistence.db import GameStore
from artsus.util.rng import Rng
from artsus.util.time import monotonic

logger = logging.getLogger(__name__)


class AnswerWaiter:
    """Lets callers block until a round's answer is recorded.

    ``notify`` wakes in-process waiters at once; answers written by other
    processes are picked up by re-reading the store every poll interval.
    """

    def __init__(
        self,
        store: GameStore,
        poll_interval: float = config.ANSWER_POLL_INTERVAL,
        timeout: float = config.ANSWER_TIMEOUT,
    ) -> None:
        self.store = store
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._lock = threading.Lock()
        self._events: dict[str, threading.Event] = {}
        self._waiting: dict[str, int] = {}

    def _acquire(self, round_uuid: str) -> threading.Event:
        with self._lock:
            self._waiting[round_uuid] = self._waiting.get(round_uuid, 0) + 1
            return self._events.setdefault(round_uuid, threading.Event())

    def _release(self, round_uuid: str) -> None:
        with self._lock:
            remaining = self._waiting.pop(round_uuid) - 1
            if remaining:
                self._waiting[round_uuid] = remaining
            else:
                self._events.pop(round_uuid, None)

    def notify(self, round_uuid: str) -> None:
        with self._lock:
            event = self._events.pop(round_uuid, None)
        if event is not None:
            event.set()

    def wait(
        self,
        round_uuid: str,
        timeout: float | None = None,
        poll_interval: float | None = None,
        cancel: threading.Event | None = None,
    ) -> str:
        timeout = self.timeout if timeout is None else timeout
        poll_interval = self.poll_interval if poll_interval is None else poll_interval
        started = monotonic()
        deadline = started + timeout
        event = self._acquire(round_uuid)
        try:
            while True:
                answer = self.store.get_answer(round_uuid)
                if answer:
                    logger.debug("Answer found for round %s", round_uuid)
                    return answer
                if cancel is not None and cancel.is_set():
                    raise WaitCancelled(f"wait for round {round_uuid} was cancelled")
                remaining = deadline - monotonic()
                if remaining <= 0:
                    logger.warning("Timed out waiting for answer on round %s", round_uuid)
                    raise AnswerTimeout(round_uuid, monotonic() - started)
                logger.debug("Answer for round %s still pending", round_uuid)
                event.wait(min(poll_interval, remaining))
        finally:
            self._release(round_uuid)


def start_round(store: GameStore, investigation_uuid: str, rng: Rng) -> Round:
    if not investigation_uuid:
        raise ValidationError("investigation identifier is required")
    questions = store.all_questions()
    if not questions:
        raise NotFound("question catalogue is empty")
    round_ = Round(investigation_uuid=investigation_uuid, question=rng.choice(questions))
    store.save_round(round_)
    logger.info("New round %s: %s", round_.uuid, round_.question.english)
    return round_


def record_answer(
    store: GameStore, round_uuid: str, answer: str, waiter: AnswerWaiter | None = None
) -> str:
    """Store the first answer for a round and return whichever answer is stored."""
    if not answer:
        raise ValidationError("answer text must not be empty")
    written, stored = store.set_answer_if_empty(round_uuid, answer)
    if written:
        logger.info("Answer recorded for round %s", round_uuid)
        if waiter is not None:
            waiter.notify(round_uuid)
    elif stored != answer:
        logger.warning(
            "Ignoring divergent answer for round %s: kept %r, got %r", round_uuid, stored, answer
        )
    return stored
