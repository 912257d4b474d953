"""Service for evaluating one-time milestone achievements."""

from __future__ import annotations

from dataclasses import dataclass

from code_archaeology.constants.game_constants import ERA_ORDER, SCORE_ACHIEVEMENT_THRESHOLD
from code_archaeology.core.models import Achievements, GameState


@dataclass(frozen=True, slots=True)
class AchievementInfo:
    name: str
    title: str
    description: str


ACHIEVEMENT_INFO: dict[str, AchievementInfo] = {
    "first_dig": AchievementInfo("first_dig", "First Dig", "Excavate your first cell."),
    "first_fragment": AchievementInfo("first_fragment", "Fragment Hunter", "Find your first code fragment."),
    "era_quota_met": AchievementInfo("era_quota_met", "Site Cleared", "Find every fragment on a dig site."),
    "all_eras_unlocked": AchievementInfo("all_eras_unlocked", "Time Traveller", "Unlock every era."),
    "score_100": AchievementInfo("score_100", "Historian", f"Reach a score of {SCORE_ACHIEVEMENT_THRESHOLD}."),
}


class AchievementTracker:
    """Flips achievement flags on a ``GameState``. Flags are never cleared here."""

    def evaluate(
        self,
        state: GameState,
        *,
        dug: bool = False,
        fragment_found: bool = False,
        board_complete: bool = False,
    ) -> list[str]:
        """Apply every satisfied condition and return the names that were newly unlocked."""
        achievements: Achievements = state.achievements
        newly_unlocked: list[str] = []

        conditions = {
            "first_dig": dug,
            "first_fragment": fragment_found,
            "era_quota_met": board_complete,
            "all_eras_unlocked": list(state.unlocked_eras) == list(ERA_ORDER),
            "score_100": state.score >= SCORE_ACHIEVEMENT_THRESHOLD,
        }
        for name, satisfied in conditions.items():
            if satisfied and achievements.unlock(name):
                newly_unlocked.append(name)
        return newly_unlocked
