"""Local JSON persistence for game progress.

The saved record mirrors the shape the browser build kept under a single
``localStorage`` key: camelCase keys, one document per key. A record that
fails to parse or validate is discarded as a whole and defaults are used.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from code_archaeology.constants.game_constants import BOMB_COUNT, ERA_ORDER, FRAGMENT_QUOTA, GRID_SIZE
from code_archaeology.constants.storage_constants import DEFAULT_SAVE_DIR, SAVE_KEY
from code_archaeology.core.errors import PersistenceCorrupt
from code_archaeology.core.models import (
    Achievements,
    BoardSnapshot,
    CellContent,
    GameState,
    Statistics,
    default_state,
)

logger = logging.getLogger(__name__)


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class StatisticsRecord(_Record):
    questions_answered: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    incorrect_answers: int = Field(default=0, ge=0)
    quizzes_passed: int = Field(default=0, ge=0)
    quizzes_failed: int = Field(default=0, ge=0)


class AchievementsRecord(_Record):
    first_dig: bool = False
    first_fragment: bool = False
    era_quota_met: bool = False
    all_eras_unlocked: bool = False
    score_100: bool = False


class BoardRecord(_Record):
    fragment_count: int = Field(ge=0)
    generated: bool
    contents: list[CellContent] = Field(min_length=GRID_SIZE, max_length=GRID_SIZE)
    fragment_indices: list[int | None] = Field(min_length=GRID_SIZE, max_length=GRID_SIZE)
    revealed: list[bool] = Field(min_length=GRID_SIZE, max_length=GRID_SIZE)

    @model_validator(mode="after")
    def _check_cells(self) -> "BoardRecord":
        for content, index, revealed in zip(self.contents, self.fragment_indices, self.revealed):
            if content is CellContent.BOMB and revealed:
                raise ValueError("A revealed bomb cannot be saved.")
            if (content is CellContent.FRAGMENT) != (index is not None):
                raise ValueError("Fragment cells must carry a fragment index.")

        if not self.generated:
            if any(self.revealed) or any(content is not CellContent.EMPTY for content in self.contents):
                raise ValueError("An ungenerated board has no content and no revealed cells.")
            return self

        # Generation happens on a safe reveal, so a generated board always has one.
        if not any(self.revealed):
            raise ValueError("A generated board must have at least one revealed cell.")
        bombs = sum(content is CellContent.BOMB for content in self.contents)
        if bombs != BOMB_COUNT:
            raise ValueError(f"A generated board has exactly {BOMB_COUNT} bombs, not {bombs}.")
        quota = min(FRAGMENT_QUOTA, self.fragment_count)
        indices = sorted(index for index in self.fragment_indices if index is not None)
        if indices != list(range(quota)):
            raise ValueError(f"Fragment indices {indices} do not cover 0..{quota - 1} exactly once.")
        return self


class SavedProgress(_Record):
    """Validated on-disk record."""

    current_era: str
    fragments_found: list[int] = Field(default_factory=list)
    score: int = Field(default=0, ge=0)
    unlocked_eras: list[str]
    statistics: StatisticsRecord = Field(default_factory=StatisticsRecord)
    achievements: AchievementsRecord = Field(default_factory=AchievementsRecord)
    discovered_fragments: dict[str, list[str]] = Field(default_factory=dict)
    board: BoardRecord | None = None
    timestamp: str | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "SavedProgress":
        unlocked = list(self.unlocked_eras)
        if not unlocked or unlocked != list(ERA_ORDER[: len(unlocked)]):
            raise ValueError(f"Unlocked eras {unlocked} are not a prefix of {list(ERA_ORDER)}.")
        if self.current_era not in unlocked:
            raise ValueError(f"Current era '{self.current_era}' is not unlocked.")
        if len(set(self.fragments_found)) != len(self.fragments_found):
            raise ValueError("Found fragment positions must be unique.")
        if any(not 0 <= position < GRID_SIZE for position in self.fragments_found):
            raise ValueError("Found fragment position out of range.")
        if self.board is not None:
            on_board = {
                position
                for position, (content, revealed) in enumerate(zip(self.board.contents, self.board.revealed))
                if revealed and content is CellContent.FRAGMENT
            }
            if on_board != set(self.fragments_found):
                raise ValueError("Found fragments do not match the saved board.")
        unknown = set(self.discovered_fragments) - set(ERA_ORDER)
        if unknown:
            raise ValueError(f"Museum refers to unknown eras: {sorted(unknown)}")
        return self

    @classmethod
    def from_state(cls, state: GameState) -> "SavedProgress":
        board = None
        if state.board is not None:
            board = BoardRecord(
                fragment_count=state.board.fragment_count,
                generated=state.board.generated,
                contents=list(state.board.contents),
                fragment_indices=list(state.board.fragment_indices),
                revealed=list(state.board.revealed),
            )
        return cls(
            current_era=state.current_era,
            fragments_found=list(state.fragments_found),
            score=state.score,
            unlocked_eras=list(state.unlocked_eras),
            statistics=StatisticsRecord(
                questions_answered=state.statistics.questions_answered,
                correct_answers=state.statistics.correct_answers,
                incorrect_answers=state.statistics.incorrect_answers,
                quizzes_passed=state.statistics.quizzes_passed,
                quizzes_failed=state.statistics.quizzes_failed,
            ),
            achievements=AchievementsRecord(**state.achievements.as_dict()),
            discovered_fragments={era: list(ids) for era, ids in state.discovered_fragments.items()},
            board=board,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    def to_state(self) -> GameState:
        board = None
        if self.board is not None:
            board = BoardSnapshot(
                fragment_count=self.board.fragment_count,
                generated=self.board.generated,
                contents=list(self.board.contents),
                fragment_indices=list(self.board.fragment_indices),
                revealed=list(self.board.revealed),
            )
        return GameState(
            current_era=self.current_era,
            fragments_found=list(self.fragments_found),
            score=self.score,
            unlocked_eras=list(self.unlocked_eras),
            statistics=Statistics(**self.statistics.model_dump()),
            achievements=Achievements(**self.achievements.model_dump()),
            discovered_fragments={era: list(ids) for era, ids in self.discovered_fragments.items()},
            board=board,
        )


class ProgressStore:
    """Reads and writes one keyed save slot under a directory."""

    def __init__(self, directory: Path | str = DEFAULT_SAVE_DIR, key: str = SAVE_KEY) -> None:
        self._directory = Path(directory)
        self._key = key

    @property
    def path(self) -> Path:
        return self._directory / f"{self._key}.json"

    def save(self, state: GameState) -> None:
        """Overwrite the slot. I/O failures are logged, never raised."""
        document = SavedProgress.from_state(state).model_dump(by_alias=True, mode="json")
        target = self.path
        temp = target.with_suffix(".json.tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            temp.write_text(json.dumps(document, indent=2), encoding="utf-8")
            temp.replace(target)
        except OSError:
            logger.exception("Could not save progress to %s", target)
            return
        logger.debug("Progress saved to %s", target)

    def load(self) -> GameState:
        """Return the saved state, or defaults when the slot is missing or corrupt."""
        try:
            return self.load_strict()
        except FileNotFoundError:
            return default_state()
        except PersistenceCorrupt as exc:
            logger.warning("Discarding saved progress: %s", exc)
            return default_state()

    def load_strict(self) -> GameState:
        """Like ``load`` but raises ``PersistenceCorrupt`` (or ``FileNotFoundError``)."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceCorrupt(f"Could not read {self.path}: {exc}") from exc
        try:
            return SavedProgress.model_validate_json(text).to_state()
        except ValidationError as exc:
            raise PersistenceCorrupt(f"Saved progress is invalid: {exc.error_count()} error(s)") from exc

    def has_save(self) -> bool:
        return self.path.exists()

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
