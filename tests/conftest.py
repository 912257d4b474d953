from __future__ import annotations

import random
from collections.abc import Callable
from pathlib import Path

import pytest

from code_archaeology.constants.game_constants import ERA_ORDER
from code_archaeology.core.era_catalog import EraCatalog
from code_archaeology.core.models import CellContent, Era, Fragment, GamePhase, Question
from code_archaeology.core.progression_controller import ProgressionController
from code_archaeology.core.services.progress_store import ProgressStore


def build_fragment(era_id: str, index: int, correct: int = 0) -> Fragment:
    return Fragment(
        id=f"{era_id}-{index}",
        title=f"{era_id} fragment {index}",
        code=f"code {index}",
        description=f"About fragment {index}",
        question=Question(
            text=f"Question {index} of {era_id}?",
            options=("alpha", "beta", "gamma", "delta"),
            correct_index=correct,
            explanation=f"Because {index}.",
        ),
    )


def build_catalog(fragment_count: int | dict[str, int] = 7) -> EraCatalog:
    counts = fragment_count if isinstance(fragment_count, dict) else {era: fragment_count for era in ERA_ORDER}
    eras = []
    for year, era_id in zip((1957, 1972, 1991), ERA_ORDER):
        count = counts.get(era_id, 7)
        eras.append(
            Era(
                id=era_id,
                name=era_id.upper(),
                year=year,
                description=f"The {era_id} era",
                total_fragments=count,
                fragments=tuple(build_fragment(era_id, i, correct=i % 4) for i in range(count)),
            )
        )
    return EraCatalog(eras)


@pytest.fixture
def catalog() -> EraCatalog:
    return build_catalog()


@pytest.fixture
def store(tmp_path: Path) -> ProgressStore:
    return ProgressStore(tmp_path / "saves")


@pytest.fixture
def make_controller(catalog: EraCatalog, store: ProgressStore) -> Callable[..., ProgressionController]:
    def factory(seed: int = 7, **overrides: object) -> ProgressionController:
        return ProgressionController(
            catalog=overrides.get("catalog", catalog),  # type: ignore[arg-type]
            store=overrides.get("store", store),  # type: ignore[arg-type]
            rng=random.Random(seed),
        )

    return factory


@pytest.fixture
def controller(make_controller: Callable[..., ProgressionController]) -> ProgressionController:
    return make_controller()


def positions_with(controller: ProgressionController, content: CellContent) -> list[int]:
    board = controller.get_state().board
    assert board is not None and board.generated
    return [position for position, value in enumerate(board.contents) if value is content]


def dig_out_board(controller: ProgressionController) -> None:
    """Reveal every fragment of the current board, starting with a safe first click."""
    controller.cell_clicked(0)
    for position in positions_with(controller, CellContent.FRAGMENT):
        if controller.get_phase() is not GamePhase.DIGGING:
            break
        if position not in controller.get_state().fragments_found:
            controller.cell_clicked(position)


def answer_quiz(controller: ProgressionController, catalog: EraCatalog, correct_answers: int):
    """Answer the running quiz, getting the first ``correct_answers`` right. Returns the last TurnResult."""
    result = None
    answered = 0
    while controller.get_phase() is GamePhase.QUIZZING:
        view = controller.snapshot().question
        assert view is not None
        fragment = next(
            f for f in catalog.fragments(controller.snapshot().current_era) if f.id == view.fragment_id
        )
        correct = fragment.question.correct_index
        choice = correct if answered < correct_answers else (correct + 1) % len(fragment.question.options)
        controller.answer_selected(choice)
        answered += 1
        result = controller.next_question()
    return result
