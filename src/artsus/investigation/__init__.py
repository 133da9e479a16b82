"""Investigation rules: suspect pools, rounds, eliminations and scoring."""

from .ledger import (
    EliminationResult,
    compute_status,
    eliminate,
    investigation_outcome,
    is_game_over,
    is_investigation_over,
)
from .pool import choose_criminal, select_pool
from .rounds import AnswerWaiter, record_answer, start_round
from .scoring import award_score, score_amount
from .selection import pick_index

__all__ = [
    "AnswerWaiter",
    "EliminationResult",
    "award_score",
    "choose_criminal",
    "compute_status",
    "eliminate",
    "investigation_outcome",
    "is_game_over",
    "is_investigation_over",
    "pick_index",
    "record_answer",
    "score_amount",
    "select_pool",
    "start_round",
]
