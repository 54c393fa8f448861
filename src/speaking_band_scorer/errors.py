from __future__ import annotations


class BandScorerError(ValueError):
    """Base class for input problems reported back to the caller."""


class InvalidInputError(BandScorerError):
    """Raised when submitted text is missing, blank or not a string."""


class ShapeMismatchError(BandScorerError):
    """Raised when a batch has a different number of questions and answers."""

    def __init__(self, num_questions: int, num_answers: int) -> None:
        super().__init__(
            f"Mismatch between number of questions ({num_questions}) "
            f"and answers ({num_answers})."
        )
        self.num_questions = num_questions
        self.num_answers = num_answers


class GrammarCheckError(RuntimeError):
    """Raised when the grammar-check collaborator cannot produce a result."""
