"""Events and snapshots handed to the presentation layer after each action."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from code_archaeology.core.models import Fragment, GamePhase
from code_archaeology.core.services.quiz_engine import AnswerFeedback, QuestionView, QuizResult


@dataclass(frozen=True, slots=True)
class FragmentFound:
    position: int
    fragment_index: int
    fragment: Fragment | None


@dataclass(frozen=True, slots=True)
class FragmentReopened:
    position: int
    fragment_index: int
    fragment: Fragment | None


@dataclass(frozen=True, slots=True)
class EmptyRevealed:
    position: int


@dataclass(frozen=True, slots=True)
class AlreadyRevealed:
    position: int


@dataclass(frozen=True, slots=True)
class BombTriggered:
    position: int


@dataclass(frozen=True, slots=True)
class BoardReset:
    era_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class BoardCompleted:
    era_id: str
    fragments_found: int


@dataclass(frozen=True, slots=True)
class QuizStarted:
    era_id: str
    question: QuestionView


@dataclass(frozen=True, slots=True)
class QuizSkipped:
    era_id: str


@dataclass(frozen=True, slots=True)
class AnswerEvaluated:
    feedback: AnswerFeedback
    points_awarded: int


@dataclass(frozen=True, slots=True)
class NextQuestion:
    question: QuestionView


@dataclass(frozen=True, slots=True)
class QuizFinished:
    era_id: str
    result: QuizResult


@dataclass(frozen=True, slots=True)
class EraUnlocked:
    era_id: str


@dataclass(frozen=True, slots=True)
class EraChanged:
    era_id: str


@dataclass(frozen=True, slots=True)
class GameCompleted:
    score: int


@dataclass(frozen=True, slots=True)
class AchievementUnlocked:
    name: str
    title: str


@dataclass(frozen=True, slots=True)
class ProgressReset:
    pass


GameEvent = (
    FragmentFound
    | FragmentReopened
    | EmptyRevealed
    | AlreadyRevealed
    | BombTriggered
    | BoardReset
    | BoardCompleted
    | QuizStarted
    | QuizSkipped
    | AnswerEvaluated
    | NextQuestion
    | QuizFinished
    | EraUnlocked
    | EraChanged
    | GameCompleted
    | AchievementUnlocked
    | ProgressReset
)


@dataclass(frozen=True, slots=True)
class CellView:
    """A cell as the player may see it; hidden cells expose no content."""

    position: int
    revealed: bool
    content: str | None
    fragment_index: int | None


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """Everything needed to redraw the screen."""

    phase: GamePhase
    current_era: str
    era_display_name: str
    score: int
    unlocked_eras: tuple[str, ...]
    fragments_found: tuple[int, ...]
    fragment_quota: int
    progress_text: str
    cells: tuple[CellView, ...]
    achievements: dict[str, bool]
    statistics: dict[str, int]
    question: QuestionView | None = None
    quiz_progress: tuple[int, int, int] | None = None


@dataclass(frozen=True, slots=True)
class TurnResult:
    events: list[GameEvent] = field(default_factory=list)
    snapshot: GameSnapshot | None = None


def event_to_dict(event: GameEvent) -> dict[str, Any]:
    """Serialize an event with its class name as ``type``."""
    return {"type": type(event).__name__, **_jsonable(asdict(event))}


def snapshot_to_dict(snapshot: GameSnapshot) -> dict[str, Any]:
    return _jsonable(asdict(snapshot))


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value
