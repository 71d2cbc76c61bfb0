"""Attack-board occupancy and control."""

from collections.abc import Iterable

from tridchess.game.ids import AttackBoardId, Color
from tridchess.game.pieces import Piece

# A board carrying more pieces than this cannot move
MAX_PASSENGERS = 1


def passengers(board: AttackBoardId, pieces: Iterable[Piece]) -> list[Piece]:
    return [p for p in pieces if p.level == board]


def controller(board: AttackBoardId, pieces: Iterable[Piece]) -> Color | None:
    """Side controlling an attack board.

    An empty board belongs to its original owner, a lone passenger hijacks
    it for its own side, and two or more passengers leave it contested.

    Returns:
        Controlling colour, or None when contested
    """
    riders = passengers(board, pieces)
    if not riders:
        return board.owner
    if len(riders) == 1:
        return riders[0].color
    return None


def can_move(board: AttackBoardId, pieces: Iterable[Piece]) -> bool:
    return len(passengers(board, pieces)) <= MAX_PASSENGERS
