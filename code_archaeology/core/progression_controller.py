"""Business logic tying the board, quiz, achievements and persistence together."""

from __future__ import annotations

import copy
import logging
import random
from threading import Lock

from code_archaeology.constants.about import (
    PROGRESS_COMPLETE_TEXT,
    PROGRESS_PARTIAL_TEMPLATE,
    PROGRESS_START_TEXT,
)
from code_archaeology.constants.game_constants import ERA_ORDER, POINTS_PER_CORRECT_ANSWER
from code_archaeology.core.era_catalog import EraCatalog
from code_archaeology.core.errors import BoardNotActive, EraLocked, SessionNotActive, UnknownEra
from code_archaeology.core.events import (
    AchievementUnlocked,
    AlreadyRevealed,
    AnswerEvaluated,
    BoardCompleted,
    BoardReset,
    BombTriggered,
    CellView,
    EmptyRevealed,
    EraChanged,
    EraUnlocked,
    FragmentFound,
    FragmentReopened,
    GameCompleted,
    GameEvent,
    GameSnapshot,
    NextQuestion,
    ProgressReset,
    QuizFinished,
    QuizSkipped,
    QuizStarted,
    TurnResult,
)
from code_archaeology.core.models import CellContent, Fragment, GamePhase, GameState, default_state
from code_archaeology.core.services.achievements import ACHIEVEMENT_INFO, AchievementTracker
from code_archaeology.core.services.minesweeper_board import MinesweeperBoard, RevealKind
from code_archaeology.core.services.progress_store import ProgressStore
from code_archaeology.core.services.quiz_engine import QuizEngine, QuizResult

logger = logging.getLogger(__name__)


class ProgressionController:
    """Facade for the game services: EraCatalog, MinesweeperBoard, QuizEngine and ProgressStore.

    Every public action runs under one lock, mutates the owned ``GameState``
    and persists it before returning a ``TurnResult``. Rejected actions raise
    a ``GameError`` and leave the state untouched.
    """

    def __init__(
        self,
        catalog: EraCatalog,
        store: ProgressStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._lock = Lock()
        self._catalog = catalog
        self._store = store
        rng = rng or random.Random()

        # Services
        self._board = MinesweeperBoard(rng)
        self._quiz = QuizEngine(rng)
        self._achievements = AchievementTracker()

        self._phase = GamePhase.DIGGING
        self._state = store.load() if store is not None else default_state()
        self._resume_board()

    # --- UI-facing actions ---

    def cell_clicked(self, position: int) -> TurnResult:
        with self._lock:
            if self._phase is not GamePhase.DIGGING:
                raise BoardNotActive(f"The dig site is closed while the game is in '{self._phase.value}'.")
            outcome = self._board.reveal(position)
            events: list[GameEvent] = []

            if outcome.kind is RevealKind.BOMB_TRIGGERED:
                logger.info("Bomb triggered at cell %s in era '%s'", position, self._state.current_era)
                events.append(BombTriggered(position))
                self._new_board()
                events.append(BoardReset(self._state.current_era, reason="bomb"))
                self._persist()
                return self._result(events)

            if outcome.kind is RevealKind.ALREADY_REVEALED:
                return self._result([AlreadyRevealed(position)])
            if outcome.kind is RevealKind.FRAGMENT_REOPENED:
                fragment = self._fragment_at(outcome.fragment_index)
                return self._result([FragmentReopened(position, outcome.fragment_index, fragment)])

            fragment_found = outcome.kind is RevealKind.FRAGMENT_FOUND
            if fragment_found:
                fragment = self._fragment_at(outcome.fragment_index)
                self._state.fragments_found = self._board.found_positions()
                if fragment is not None:
                    self._record_discovery(fragment)
                events.append(FragmentFound(position, outcome.fragment_index, fragment))
            else:
                events.append(EmptyRevealed(position))

            board_complete = self._board.is_complete()
            events.extend(
                self._check_achievements(dug=True, fragment_found=fragment_found, board_complete=board_complete)
            )
            if fragment_found and board_complete:
                events.append(BoardCompleted(self._state.current_era, len(self._state.fragments_found)))
                events.extend(self._on_board_complete())

            self._state.board = self._board.snapshot()
            self._persist()
            return self._result(events)

    def answer_selected(self, option_index: int) -> TurnResult:
        with self._lock:
            if self._phase is not GamePhase.QUIZZING:
                raise SessionNotActive("There is no quiz running.")
            feedback = self._quiz.submit_answer(option_index)

            stats = self._state.statistics
            stats.questions_answered += 1
            points = 0
            if feedback.is_correct:
                stats.correct_answers += 1
                points = POINTS_PER_CORRECT_ANSWER
                self._state.score += points
            else:
                stats.incorrect_answers += 1

            events: list[GameEvent] = [AnswerEvaluated(feedback, points)]
            events.extend(self._check_achievements())
            self._persist()
            return self._result(events)

    def next_question(self) -> TurnResult:
        with self._lock:
            if self._phase is not GamePhase.QUIZZING:
                raise SessionNotActive("There is no quiz running.")
            view = self._quiz.advance()
            if view is not None:
                return self._result([NextQuestion(view)])

            events = self._on_quiz_finished(self._quiz.result())
            self._persist()
            return self._result(events)

    def switch_era(self, era_id: str) -> TurnResult:
        with self._lock:
            if era_id not in ERA_ORDER:
                raise UnknownEra(era_id)
            if era_id not in self._state.unlocked_eras:
                raise EraLocked(era_id)
            self._quiz.stop_session()
            self._enter_era(era_id)
            self._persist()
            return self._result([EraChanged(era_id), BoardReset(era_id, reason="era_switch")])

    def reset_all(self) -> TurnResult:
        with self._lock:
            self._quiz.stop_session()
            self._state = default_state()
            self._new_board()
            logger.info("Progress reset")
            self._persist()
            return self._result([ProgressReset()])

    def restart_board(self) -> TurnResult:
        """Abandon the current dig site and start over in the same era."""
        with self._lock:
            if self._phase is not GamePhase.DIGGING:
                raise BoardNotActive("Only an active dig site can be restarted.")
            self._new_board()
            self._persist()
            return self._result([BoardReset(self._state.current_era, reason="restart")])

    # --- Read-only queries ---

    def open_fragment(self, position: int) -> Fragment | None:
        """Return the fragment behind a revealed cell, or None."""
        with self._lock:
            cell = self._board.get_cell(position)
            if not cell.is_revealed or cell.content is not CellContent.FRAGMENT:
                return None
            return self._fragment_at(cell.fragment_index)

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return self._snapshot()

    def museum(self) -> dict[str, list[Fragment]]:
        """Discovered fragments per era, in era content order."""
        with self._lock:
            exhibits: dict[str, list[Fragment]] = {}
            for era in self._catalog.eras():
                found = set(self._state.discovered_fragments.get(era.id, []))
                exhibits[era.id] = [fragment for fragment in era.fragments if fragment.id in found]
            return exhibits

    def progress_text(self) -> str:
        with self._lock:
            return self._progress_text()

    def get_state(self) -> GameState:
        """Return a detached copy of the persisted state."""
        with self._lock:
            self._state.board = self._board.snapshot()
            return copy.deepcopy(self._state)

    def get_phase(self) -> GamePhase:
        with self._lock:
            return self._phase

    def get_catalog(self) -> EraCatalog:
        return self._catalog

    # --- Transitions ---

    def _on_board_complete(self) -> list[GameEvent]:
        if self._quiz.is_active():
            logger.warning("Quiz already running for era '%s'; ignoring repeated start", self._state.current_era)
            return []
        era_id = self._state.current_era
        self._phase = GamePhase.QUIZ_PENDING
        fragments = self._catalog.fragments(era_id)
        if not fragments:
            logger.warning("Era '%s' has no questions; skipping its quiz", era_id)
            events: list[GameEvent] = [QuizSkipped(era_id)]
            events.extend(self._advance_after_pass())
            return events
        view = self._quiz.start_session(fragments)
        self._phase = GamePhase.QUIZZING
        logger.info("Quiz started for era '%s' with %s questions", era_id, view.total)
        return [QuizStarted(era_id, view)]

    def _on_quiz_finished(self, result: QuizResult) -> list[GameEvent]:
        era_id = self._state.current_era
        events: list[GameEvent] = [QuizFinished(era_id, result)]
        logger.info(
            "Quiz for era '%s' finished: %s/%s correct, passed=%s",
            era_id,
            result.correct_count,
            result.answered_count,
            result.passed,
        )
        if result.passed:
            self._phase = GamePhase.QUIZ_PASSED
            self._state.statistics.quizzes_passed += 1
            events.extend(self._advance_after_pass())
        else:
            self._phase = GamePhase.QUIZ_FAILED
            self._state.statistics.quizzes_failed += 1
            self._new_board()
            events.append(BoardReset(era_id, reason="quiz_failed"))
        return events

    def _advance_after_pass(self) -> list[GameEvent]:
        era_id = self._state.current_era
        position = ERA_ORDER.index(era_id)
        if position == len(ERA_ORDER) - 1:
            self._new_board()
            self._phase = GamePhase.GAME_COMPLETE
            logger.info("All eras completed with score %s", self._state.score)
            return [GameCompleted(self._state.score)]

        next_era = ERA_ORDER[position + 1]
        events: list[GameEvent] = []
        if next_era not in self._state.unlocked_eras:
            self._state.unlocked_eras.append(next_era)
            logger.info("Era '%s' unlocked", next_era)
            events.append(EraUnlocked(next_era))
            events.extend(self._check_achievements())
        self._enter_era(next_era)
        events.append(EraChanged(next_era))
        return events

    def _enter_era(self, era_id: str) -> None:
        self._state.current_era = era_id
        self._new_board()

    def _new_board(self) -> None:
        self._board.create(self._catalog.fragment_count(self._state.current_era))
        self._state.fragments_found = []
        self._state.board = self._board.snapshot()
        self._phase = GamePhase.DIGGING

    def _resume_board(self) -> None:
        saved = self._state.board
        if saved is None:
            self._new_board()
            return
        try:
            self._board.restore(saved)
        except ValueError as exc:
            logger.warning("Saved board could not be restored: %s", exc)
            self._new_board()
            return
        if self._board.fragment_count != self._catalog.fragment_count(self._state.current_era):
            logger.info("Era content changed since the last save; starting a fresh board")
            self._new_board()
            return
        self._state.fragments_found = self._board.found_positions()
        if self._board.is_generated() and self._board.is_complete():
            # Quiz progress is not saved; a completed board starts a freshly sampled quiz.
            self._on_board_complete()
            self._persist()

    def _check_achievements(self, **flags: bool) -> list[GameEvent]:
        unlocked = self._achievements.evaluate(self._state, **flags)
        for name in unlocked:
            logger.info("Achievement unlocked: %s", name)
        return [AchievementUnlocked(name, ACHIEVEMENT_INFO[name].title) for name in unlocked]

    def _record_discovery(self, fragment: Fragment) -> None:
        discovered = self._state.discovered_fragments.setdefault(self._state.current_era, [])
        if fragment.id not in discovered:
            discovered.append(fragment.id)

    def _fragment_at(self, fragment_index: int | None) -> Fragment | None:
        if fragment_index is None:
            return None
        fragments = self._catalog.get(self._state.current_era).fragments
        if 0 <= fragment_index < len(fragments):
            return fragments[fragment_index]
        return None

    def _persist(self) -> None:
        if self._store is None:
            return
        self._state.board = self._board.snapshot()
        self._store.save(self._state)

    # --- Views ---

    def _result(self, events: list[GameEvent]) -> TurnResult:
        return TurnResult(events=events, snapshot=self._snapshot())

    def _snapshot(self) -> GameSnapshot:
        era = self._catalog.get(self._state.current_era)
        cells = tuple(
            CellView(
                position=cell.position,
                revealed=cell.is_revealed,
                content=cell.content.value if cell.is_revealed else None,
                fragment_index=cell.fragment_index if cell.is_revealed else None,
            )
            for cell in self._board.get_cells()
        )
        stats = self._state.statistics
        quiz_active = self._phase is GamePhase.QUIZZING
        return GameSnapshot(
            phase=self._phase,
            current_era=era.id,
            era_display_name=era.display_name,
            score=self._state.score,
            unlocked_eras=tuple(self._state.unlocked_eras),
            fragments_found=tuple(sorted(self._state.fragments_found)),
            fragment_quota=self._board.fragment_quota,
            progress_text=self._progress_text(),
            cells=cells,
            achievements=self._state.achievements.as_dict(),
            statistics={
                "questions_answered": stats.questions_answered,
                "correct_answers": stats.correct_answers,
                "incorrect_answers": stats.incorrect_answers,
                "quizzes_passed": stats.quizzes_passed,
                "quizzes_failed": stats.quizzes_failed,
            },
            question=self._quiz.current_view() if quiz_active else None,
            quiz_progress=self._quiz.progress() if quiz_active else None,
        )

    def _progress_text(self) -> str:
        found = len(self._state.fragments_found)
        total = self._board.fragment_quota
        if found == 0:
            return PROGRESS_START_TEXT
        if found < total:
            return PROGRESS_PARTIAL_TEMPLATE.format(found=found, total=total)
        return PROGRESS_COMPLETE_TEXT
