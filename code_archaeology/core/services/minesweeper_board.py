"""Service for generating and revealing the 4x3 dig-site grid."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import random

from code_archaeology.constants.game_constants import BOMB_COUNT, FRAGMENT_QUOTA, GRID_SIZE
from code_archaeology.core.errors import BoardInvalidated, InvalidCellPosition
from code_archaeology.core.models import BoardSnapshot, Cell, CellContent, CellState


class RevealKind(str, Enum):
    FRAGMENT_FOUND = "fragment_found"
    EMPTY_REVEALED = "empty_revealed"
    BOMB_TRIGGERED = "bomb_triggered"
    FRAGMENT_REOPENED = "fragment_reopened"
    ALREADY_REVEALED = "already_revealed"


@dataclass(frozen=True, slots=True)
class RevealOutcome:
    """Result of one reveal request."""

    kind: RevealKind
    position: int
    fragment_index: int | None = None


class MinesweeperBoard:
    """Tracks one board instance.

    Content is assigned on the first reveal so the clicked cell is never a
    bomb. Bombs are drawn from the other cells; fragments fill the safe
    cells in shuffled order, mapped to fragment indices in era order.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._cells: list[Cell] = []
        self._found: list[int] = []
        self._fragment_count: int = 0
        self._generated: bool = False
        self._invalidated: bool = False
        self.create(0)

    def create(self, era_fragment_count: int) -> None:
        """Reset to hidden, ungenerated cells for an era with the given fragment count."""
        if era_fragment_count < 0:
            raise ValueError("Fragment count cannot be negative.")
        self._cells = [Cell(position=i) for i in range(GRID_SIZE)]
        self._found = []
        self._fragment_count = era_fragment_count
        self._generated = False
        self._invalidated = False

    def reveal(self, position: int) -> RevealOutcome:
        if not 0 <= position < GRID_SIZE:
            raise InvalidCellPosition(position, GRID_SIZE)
        if self._invalidated:
            raise BoardInvalidated("A bomb was triggered on this board; create a new board first.")
        if not self._generated:
            self._generate(safe_position=position)

        cell = self._cells[position]
        if cell.is_revealed:
            if cell.content is CellContent.FRAGMENT:
                return RevealOutcome(RevealKind.FRAGMENT_REOPENED, position, cell.fragment_index)
            return RevealOutcome(RevealKind.ALREADY_REVEALED, position)

        if cell.content is CellContent.BOMB:
            cell.state = CellState.REVEALED
            self._invalidated = True
            return RevealOutcome(RevealKind.BOMB_TRIGGERED, position)

        cell.state = CellState.REVEALED
        if cell.content is CellContent.FRAGMENT:
            self._found.append(position)
            return RevealOutcome(RevealKind.FRAGMENT_FOUND, position, cell.fragment_index)
        return RevealOutcome(RevealKind.EMPTY_REVEALED, position)

    def is_complete(self) -> bool:
        return len(self._found) >= self.fragment_quota

    @property
    def fragment_quota(self) -> int:
        return min(FRAGMENT_QUOTA, self._fragment_count)

    @property
    def fragment_count(self) -> int:
        return self._fragment_count

    def is_generated(self) -> bool:
        return self._generated

    def is_invalidated(self) -> bool:
        return self._invalidated

    def found_positions(self) -> list[int]:
        return list(self._found)

    def get_cells(self) -> list[Cell]:
        """Return copies of the cells so callers cannot mutate the board."""
        return [
            Cell(
                position=cell.position,
                state=cell.state,
                content=cell.content,
                fragment_index=cell.fragment_index,
            )
            for cell in self._cells
        ]

    def get_cell(self, position: int) -> Cell:
        if not 0 <= position < GRID_SIZE:
            raise InvalidCellPosition(position, GRID_SIZE)
        cell = self._cells[position]
        return Cell(
            position=cell.position,
            state=cell.state,
            content=cell.content,
            fragment_index=cell.fragment_index,
        )

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            fragment_count=self._fragment_count,
            generated=self._generated,
            contents=[cell.content for cell in self._cells],
            fragment_indices=[cell.fragment_index for cell in self._cells],
            revealed=[cell.is_revealed for cell in self._cells],
        )

    def restore(self, snapshot: BoardSnapshot) -> None:
        """Load a saved layout. Bombs are never restored as revealed."""
        if not len(snapshot.contents) == len(snapshot.fragment_indices) == len(snapshot.revealed) == GRID_SIZE:
            raise ValueError("Board snapshot must describe every cell.")
        self.create(snapshot.fragment_count)
        if not snapshot.generated:
            return
        for position, cell in enumerate(self._cells):
            cell.content = snapshot.contents[position]
            cell.fragment_index = snapshot.fragment_indices[position]
            if snapshot.revealed[position]:
                if cell.content is CellContent.BOMB:
                    raise ValueError("Board snapshot has a revealed bomb.")
                cell.state = CellState.REVEALED
                if cell.content is CellContent.FRAGMENT:
                    self._found.append(position)
        self._generated = True

    def _generate(self, safe_position: int) -> None:
        others = [i for i in range(GRID_SIZE) if i != safe_position]
        self._rng.shuffle(others)
        bombs = others[:BOMB_COUNT]
        safe = others[BOMB_COUNT:] + [safe_position]
        self._rng.shuffle(safe)

        for position in bombs:
            self._cells[position].content = CellContent.BOMB
        for fragment_index, position in enumerate(safe[: self.fragment_quota]):
            self._cells[position].content = CellContent.FRAGMENT
            self._cells[position].fragment_index = fragment_index
        self._generated = True
