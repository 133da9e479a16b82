"""Answer generation collaborators."""

from .answers import AnswerGenerator, answer_for_round, normalize_answer

__all__ = ["AnswerGenerator", "answer_for_round", "normalize_answer"]
