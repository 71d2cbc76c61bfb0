"""Vertical shadow rule.

A non-knight piece occupying a file-rank column blocks movement through
that column, and landing in it, on every other level. Knights neither
cast nor respect shadows.
"""

from collections.abc import Iterator

from tridchess.game.geometry import BoardLayout, World
from tridchess.game.ids import AttackBoardId, Level, SquareId
from tridchess.game.pieces import Piece
from tridchess.game.positions import PieceMap, accessible_levels


def intermediate_columns(origin: SquareId, target: SquareId) -> Iterator[tuple[int, int]]:
    """Columns strictly between two squares on a straight or diagonal line.

    Callers must only pass squares aligned on a file, rank or diagonal.
    """
    df = target.file - origin.file
    dr = target.rank - origin.rank
    steps = max(abs(df), abs(dr))
    step_file = (df > 0) - (df < 0)
    step_rank = (dr > 0) - (dr < 0)
    for i in range(1, steps):
        yield (origin.file + step_file * i, origin.rank + step_rank * i)


def column_blocker(
    piece_map: PieceMap,
    column: tuple[int, int],
    travel_levels: tuple[Level, ...],
    exclude: Piece | None = None,
) -> Piece | None:
    """First piece that blocks passage through ``column``.

    Any non-knight piece blocks through its shadow. A knight only blocks
    when it physically sits on one of the levels being travelled.
    """
    for piece, square in piece_map.in_column(*column):
        if exclude is not None and piece.id == exclude.id:
            continue
        if not piece.is_knight or square.level in travel_levels:
            return piece
    return None


def is_column_connected(
    world: World, piece_map: PieceMap, column: tuple[int, int]
) -> bool:
    """Whether any main board or active attack board has a square here."""
    return bool(accessible_levels(world, piece_map.positions, *column))


def destination_shadow(
    piece_map: PieceMap, target: SquareId, exclude: Piece | None = None
) -> Piece | None:
    """Non-knight piece on another level casting a shadow over ``target``."""
    for piece, square in piece_map.in_column(target.file, target.rank):
        if exclude is not None and piece.id == exclude.id:
            continue
        if square.level != target.level and not piece.is_knight:
            return piece
    return None


def footprint_shadow(
    piece_map: PieceMap, layout: BoardLayout, board: AttackBoardId
) -> Piece | None:
    """Non-knight piece under or over an attack board's destination footprint.

    Passengers of the moving board travel with it and never block.
    """
    for file, rank in sorted(layout.footprint):
        for piece, _square in piece_map.in_column(file, rank):
            if piece.level == board or piece.is_knight:
                continue
            return piece
    return None
