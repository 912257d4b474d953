"""Service for running the era quiz that gates progression."""

from __future__ import annotations

from dataclasses import dataclass
import random

from code_archaeology.constants.game_constants import QUIZ_PASS_THRESHOLD, QUIZ_QUESTION_COUNT
from code_archaeology.core.errors import InvalidAnswer, QuestionAlreadyAnswered, SessionNotActive
from code_archaeology.core.models import Fragment


@dataclass(frozen=True, slots=True)
class QuestionView:
    """What the presentation layer needs to show one quiz question."""

    number: int
    total: int
    text: str
    options: tuple[str, ...]
    fragment_id: str
    fragment_title: str
    fragment_code: str


@dataclass(frozen=True, slots=True)
class AnswerFeedback:
    is_correct: bool
    selected_index: int
    correct_index: int
    explanation: str


@dataclass(frozen=True, slots=True)
class QuizResult:
    correct_count: int
    answered_count: int
    passed: bool


class QuizEngine:
    """Samples questions for an era and tracks the running tally."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._active: bool = False
        self._selected: list[Fragment] = []
        self._index: int = 0
        self._correct_count: int = 0
        self._answered_count: int = 0
        self._current_answered: bool = False

    def start_session(self, era_fragments: list[Fragment]) -> QuestionView:
        if not era_fragments:
            raise ValueError("A quiz needs at least one fragment.")
        pool = list(era_fragments)
        self._rng.shuffle(pool)
        self._selected = pool[:QUIZ_QUESTION_COUNT]
        self._index = 0
        self._correct_count = 0
        self._answered_count = 0
        self._current_answered = False
        self._active = True
        return self._view(0)

    def stop_session(self) -> None:
        self._active = False
        self._selected = []
        self._index = 0
        self._current_answered = False

    def is_active(self) -> bool:
        return self._active

    def is_finished(self) -> bool:
        return self._active and self._index >= len(self._selected)

    def current_view(self) -> QuestionView | None:
        if not self._active or self.is_finished():
            return None
        return self._view(self._index)

    def submit_answer(self, selected_option_index: int) -> AnswerFeedback:
        if not self._active or self.is_finished():
            raise SessionNotActive("No quiz question is waiting for an answer.")
        if self._current_answered:
            raise QuestionAlreadyAnswered("This question has already been answered.")
        question = self._selected[self._index].question
        if not 0 <= selected_option_index < len(question.options):
            raise InvalidAnswer(
                f"Option {selected_option_index} does not exist (0..{len(question.options) - 1})."
            )

        is_correct = selected_option_index == question.correct_index
        self._answered_count += 1
        if is_correct:
            self._correct_count += 1
        self._current_answered = True
        return AnswerFeedback(
            is_correct=is_correct,
            selected_index=selected_option_index,
            correct_index=question.correct_index,
            explanation=question.explanation,
        )

    def advance(self) -> QuestionView | None:
        """Move to the next question. Returns None once the session is finished."""
        if not self._active or self.is_finished():
            raise SessionNotActive("No quiz question to move past.")
        if not self._current_answered:
            raise SessionNotActive("Answer the current question before moving on.")
        self._index += 1
        self._current_answered = False
        return self.current_view()

    def result(self) -> QuizResult:
        """Final tally. Closes the session."""
        if not self.is_finished():
            raise SessionNotActive("The quiz has not finished yet.")
        # Sessions shorter than the threshold require every answer to be correct.
        threshold = min(QUIZ_PASS_THRESHOLD, len(self._selected))
        outcome = QuizResult(
            correct_count=self._correct_count,
            answered_count=self._answered_count,
            passed=self._correct_count >= threshold,
        )
        self.stop_session()
        return outcome

    def progress(self) -> tuple[int, int, int]:
        """Return (correct, answered, total) for the running session."""
        return self._correct_count, self._answered_count, len(self._selected)

    def _view(self, index: int) -> QuestionView:
        fragment = self._selected[index]
        return QuestionView(
            number=index + 1,
            total=len(self._selected),
            text=fragment.question.text,
            options=fragment.question.options,
            fragment_id=fragment.id,
            fragment_title=fragment.title,
            fragment_code=fragment.code,
        )
