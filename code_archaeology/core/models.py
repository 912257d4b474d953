"""Domain models for the excavation game."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from code_archaeology.constants.game_constants import FIRST_ERA


class CellState(str, Enum):
    HIDDEN = "hidden"
    REVEALED = "revealed"


class CellContent(str, Enum):
    EMPTY = "empty"
    FRAGMENT = "fragment"
    BOMB = "bomb"


class GamePhase(str, Enum):
    """Current phase of the progression state machine."""

    DIGGING = "digging"
    QUIZ_PENDING = "quiz_pending"
    QUIZZING = "quizzing"
    QUIZ_PASSED = "quiz_passed"
    QUIZ_FAILED = "quiz_failed"
    GAME_COMPLETE = "game_complete"


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question attached to a fragment."""

    text: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str = ""


@dataclass(frozen=True, slots=True)
class Fragment:
    """One excavated code sample and its quiz question."""

    id: str
    title: str
    code: str
    description: str
    question: Question


@dataclass(frozen=True, slots=True)
class Era:
    """Programming-language era with its ordered fragments."""

    id: str
    name: str
    year: int
    description: str
    total_fragments: int
    fragments: tuple[Fragment, ...] = ()

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.year})"


@dataclass(slots=True)
class Cell:
    """One dig-site cell. Content is assigned when the board is generated."""

    position: int
    state: CellState = CellState.HIDDEN
    content: CellContent = CellContent.EMPTY
    fragment_index: int | None = None

    @property
    def is_revealed(self) -> bool:
        return self.state is CellState.REVEALED


@dataclass(slots=True)
class Statistics:
    """Cumulative answer and quiz counters."""

    questions_answered: int = 0
    correct_answers: int = 0
    incorrect_answers: int = 0
    quizzes_passed: int = 0
    quizzes_failed: int = 0


ACHIEVEMENT_NAMES: tuple[str, ...] = (
    "first_dig",
    "first_fragment",
    "era_quota_met",
    "all_eras_unlocked",
    "score_100",
)


@dataclass(slots=True)
class Achievements:
    """Write-once milestone flags."""

    first_dig: bool = False
    first_fragment: bool = False
    era_quota_met: bool = False
    all_eras_unlocked: bool = False
    score_100: bool = False

    def unlock(self, name: str) -> bool:
        """Set a flag. Returns True only when it was previously unset."""
        if name not in ACHIEVEMENT_NAMES:
            raise KeyError(f"Unknown achievement '{name}'.")
        if getattr(self, name):
            return False
        setattr(self, name, True)
        return True

    def as_dict(self) -> dict[str, bool]:
        return {name: getattr(self, name) for name in ACHIEVEMENT_NAMES}


@dataclass(slots=True)
class BoardSnapshot:
    """Serializable layout of a board, used to resume a saved dig site."""

    fragment_count: int
    generated: bool
    contents: list[CellContent]
    fragment_indices: list[int | None]
    revealed: list[bool]


@dataclass(slots=True)
class GameState:
    """Complete persisted progress. The single source of truth for the controller."""

    current_era: str = FIRST_ERA
    fragments_found: list[int] = field(default_factory=list)
    score: int = 0
    unlocked_eras: list[str] = field(default_factory=lambda: [FIRST_ERA])
    statistics: Statistics = field(default_factory=Statistics)
    achievements: Achievements = field(default_factory=Achievements)
    discovered_fragments: dict[str, list[str]] = field(default_factory=dict)
    board: BoardSnapshot | None = None


def default_state() -> GameState:
    """Fresh progress: first era only, nothing found."""
    return GameState()
