import random

import pytest

from code_archaeology.constants.game_constants import GRID_SIZE
from code_archaeology.core.errors import BoardInvalidated, InvalidCellPosition
from code_archaeology.core.models import CellContent
from code_archaeology.core.services.minesweeper_board import MinesweeperBoard, RevealKind


def _contents(board: MinesweeperBoard) -> list[CellContent]:
    return [cell.content for cell in board.get_cells()]


def test_create_leaves_board_ungenerated_and_hidden() -> None:
    board = MinesweeperBoard(random.Random(1))
    board.create(7)
    assert not board.is_generated()
    assert len(board.get_cells()) == GRID_SIZE
    assert all(not cell.is_revealed for cell in board.get_cells())
    assert all(cell.content is CellContent.EMPTY for cell in board.get_cells())
    assert board.found_positions() == []


@pytest.mark.parametrize("first_click", range(GRID_SIZE))
def test_first_click_is_never_a_bomb(first_click: int) -> None:
    for seed in range(40):
        board = MinesweeperBoard(random.Random(seed))
        board.create(7)
        outcome = board.reveal(first_click)
        assert outcome.kind is not RevealKind.BOMB_TRIGGERED
        contents = _contents(board)
        assert contents[first_click] is not CellContent.BOMB


@pytest.mark.parametrize("fragment_count", [0, 1, 3, 6, 7, 20])
def test_generated_board_composition(fragment_count: int) -> None:
    for seed in range(25):
        board = MinesweeperBoard(random.Random(seed))
        board.create(fragment_count)
        board.reveal(seed % GRID_SIZE)
        contents = _contents(board)
        bombs = contents.count(CellContent.BOMB)
        fragments = contents.count(CellContent.FRAGMENT)
        empties = contents.count(CellContent.EMPTY)
        assert bombs == 6
        assert fragments == min(6, fragment_count)
        assert bombs + fragments + empties == GRID_SIZE


def test_fragment_cells_map_to_distinct_indices_in_era_order() -> None:
    board = MinesweeperBoard(random.Random(3))
    board.create(9)
    board.reveal(5)
    indices = sorted(cell.fragment_index for cell in board.get_cells() if cell.content is CellContent.FRAGMENT)
    assert indices == [0, 1, 2, 3, 4, 5]
    assert all(cell.fragment_index is None for cell in board.get_cells() if cell.content is not CellContent.FRAGMENT)


def test_same_seed_gives_same_layout() -> None:
    first = MinesweeperBoard(random.Random(99))
    second = MinesweeperBoard(random.Random(99))
    for board in (first, second):
        board.create(6)
        board.reveal(4)
    assert _contents(first) == _contents(second)


def test_reveal_out_of_range_is_rejected_without_generating() -> None:
    board = MinesweeperBoard(random.Random(1))
    board.create(6)
    with pytest.raises(InvalidCellPosition):
        board.reveal(GRID_SIZE)
    with pytest.raises(InvalidCellPosition):
        board.reveal(-1)
    assert not board.is_generated()


def test_fragment_reveal_records_position_and_reopen_is_idempotent() -> None:
    board = MinesweeperBoard(random.Random(2))
    board.create(7)
    outcome = board.reveal(0)
    # With six or more fragments every safe cell holds one, including the first click.
    assert outcome.kind is RevealKind.FRAGMENT_FOUND
    assert board.found_positions() == [0]

    again = board.reveal(0)
    assert again.kind is RevealKind.FRAGMENT_REOPENED
    assert again.fragment_index == outcome.fragment_index
    assert board.found_positions() == [0]


def test_empty_cell_reveal_does_not_count_towards_quota() -> None:
    board = MinesweeperBoard(random.Random(5))
    board.create(2)
    board.reveal(0)
    empties = [cell.position for cell in board.get_cells() if cell.content is CellContent.EMPTY and not cell.is_revealed]
    assert empties
    outcome = board.reveal(empties[0])
    assert outcome.kind is RevealKind.EMPTY_REVEALED
    assert empties[0] not in board.found_positions()
    assert board.reveal(empties[0]).kind is RevealKind.ALREADY_REVEALED


def test_bomb_invalidates_board_until_recreated() -> None:
    board = MinesweeperBoard(random.Random(8))
    board.create(7)
    board.reveal(0)
    bomb = next(cell.position for cell in board.get_cells() if cell.content is CellContent.BOMB)

    outcome = board.reveal(bomb)
    assert outcome.kind is RevealKind.BOMB_TRIGGERED
    assert board.is_invalidated()
    with pytest.raises(BoardInvalidated):
        board.reveal(0)

    board.create(7)
    assert not board.is_invalidated()
    assert board.reveal(bomb).kind is not RevealKind.BOMB_TRIGGERED


def test_is_complete_tracks_found_set_against_quota() -> None:
    for fragment_count in (1, 4, 6, 10):
        board = MinesweeperBoard(random.Random(fragment_count))
        board.create(fragment_count)
        board.reveal(0)
        quota = min(6, fragment_count)
        fragments = [cell.position for cell in board.get_cells() if cell.content is CellContent.FRAGMENT]
        for position in fragments:
            assert board.is_complete() == (len(board.found_positions()) >= quota)
            if position not in board.found_positions():
                board.reveal(position)
        assert len(board.found_positions()) == quota
        assert board.is_complete()


def test_snapshot_restore_round_trip() -> None:
    board = MinesweeperBoard(random.Random(11))
    board.create(7)
    board.reveal(3)
    snapshot = board.snapshot()

    restored = MinesweeperBoard(random.Random(0))
    restored.restore(snapshot)
    assert restored.snapshot() == snapshot
    assert restored.found_positions() == board.found_positions()
    assert restored.is_generated()


def test_restore_rejects_revealed_bomb() -> None:
    board = MinesweeperBoard(random.Random(11))
    board.create(7)
    board.reveal(3)
    snapshot = board.snapshot()
    bomb = snapshot.contents.index(CellContent.BOMB)
    snapshot.revealed[bomb] = True
    with pytest.raises(ValueError):
        MinesweeperBoard().restore(snapshot)
