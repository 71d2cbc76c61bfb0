"""Piece move validation and execution.

Every function here is pure: it takes the world, the piece list and the
attack-board positions and returns a result or new pieces. Squares are
addressed by ``SquareId``; a piece's stored level is resolved through
``BoardPositions`` before comparing squares.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace

from tridchess.game.geometry import World, level_index, square_color
from tridchess.game.ids import Color, SquareId, column_label
from tridchess.game.pieces import PROMOTION_CHOICES, DeferredPromotion, Piece, PieceType
from tridchess.game.positions import (
    BoardPositions,
    PieceMap,
    accessible_squares,
    is_accessible,
    piece_level_for,
)
from tridchess.game.promotion import check_promotion, is_on_missing_promotion_plane
from tridchess.game.results import IllegalMoveError, MoveResult, ReasonCode
from tridchess.game.shadow import (
    column_blocker,
    destination_shadow,
    intermediate_columns,
    is_column_connected,
)

logger = logging.getLogger(__name__)

# Ranks from which an unmoved pawn may advance two squares
PAWN_DOUBLE_STEP_RANKS: dict[Color, tuple[int, ...]] = {
    Color.WHITE: (1, 2),
    Color.BLACK: (7, 8),
}


def pawn_direction(color: Color) -> int:
    return 1 if color is Color.WHITE else -1


def is_purely_vertical(origin: SquareId, target: SquareId) -> bool:
    return origin.column == target.column and origin.level != target.level


def is_valid_move(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    piece: Piece,
    target: SquareId,
) -> MoveResult:
    """Check whether ``piece`` may move to ``target``.

    Own-king safety is not considered here; see ``check.legal_moves_avoiding_check``.

    Args:
        world: The static world
        pieces: All pieces in play
        positions: Current attack-board positions
        piece: The piece to move
        target: Destination square

    Returns:
        MoveResult, with reason and code when invalid
    """
    piece_map = pieces if isinstance(pieces, PieceMap) else PieceMap(pieces, positions)
    return _validate(world, piece_map, piece, target)


def legal_moves(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    piece: Piece,
) -> set[SquareId]:
    """All squares ``piece`` may move to, ignoring own-king safety."""
    piece_map = pieces if isinstance(pieces, PieceMap) else PieceMap(pieces, positions)
    return {
        square
        for square in accessible_squares(world, positions)
        if _validate(world, piece_map, piece, square).valid
    }


def _validate(world: World, piece_map: PieceMap, piece: Piece, target: SquareId) -> MoveResult:
    origin = piece_map.square_of(piece)

    if not world.has_square(target):
        return MoveResult.reject(
            ReasonCode.NONEXISTENT_TARGET, f"square {target} does not exist"
        )
    if not is_accessible(target.level, piece_map.positions):
        return MoveResult.reject(
            ReasonCode.NO_CONNECTIVITY, f"no connectivity: {target.level} is not an active board"
        )
    if target == origin:
        return MoveResult.reject(ReasonCode.GEOMETRY, "piece must leave its square")
    if is_purely_vertical(origin, target):
        return MoveResult.reject(ReasonCode.GEOMETRY, "pure vertical movement prohibited")

    occupant = piece_map.at(target)
    if occupant is not None and occupant.color == piece.color:
        return MoveResult.reject(ReasonCode.BLOCKED, "destination occupied by own piece")

    match piece.type:
        case PieceType.PAWN:
            return _validate_pawn(world, piece_map, piece, origin, target, occupant)
        case PieceType.KNIGHT:
            return _validate_knight(origin, target)
        case PieceType.BISHOP:
            return _validate_bishop(world, piece_map, piece, origin, target)
        case PieceType.ROOK:
            return _validate_rook(world, piece_map, piece, origin, target)
        case PieceType.QUEEN:
            return _validate_queen(world, piece_map, piece, origin, target)
        case PieceType.KING:
            return _validate_king(piece_map, piece, origin, target)
    raise ValueError(f"Unknown piece type: {piece.type}")


def _check_landing(
    piece_map: PieceMap, piece: Piece, target: SquareId
) -> MoveResult:
    # The occupant shares the target level, so it never shadows its own square.
    blocker = destination_shadow(piece_map, target, exclude=piece)
    if blocker is not None:
        return MoveResult.reject(
            ReasonCode.VERTICAL_SHADOW,
            f"destination {target.label} blocked by vertical shadow of {blocker.id}",
        )
    return MoveResult.ok()


def _check_path(
    world: World, piece_map: PieceMap, piece: Piece, origin: SquareId, target: SquareId
) -> MoveResult:
    travel_levels = (origin.level, target.level)
    for column in intermediate_columns(origin, target):
        if not is_column_connected(world, piece_map, column):
            return MoveResult.reject(
                ReasonCode.NO_CONNECTIVITY,
                f"no connectivity at {column_label(*column)}",
            )
        blocker = column_blocker(piece_map, column, travel_levels, exclude=piece)
        if blocker is not None:
            code = ReasonCode.BLOCKED if blocker.is_knight else ReasonCode.VERTICAL_SHADOW
            return MoveResult.reject(
                code, f"path blocked at {column_label(*column)} by {blocker.id}"
            )
    return MoveResult.ok()


def _check_slide(
    world: World,
    piece_map: PieceMap,
    piece: Piece,
    origin: SquareId,
    target: SquareId,
) -> MoveResult:
    path = _check_path(world, piece_map, piece, origin, target)
    if not path.valid:
        return path
    return _check_landing(piece_map, piece, target)


def _validate_pawn(
    world: World,
    piece_map: PieceMap,
    piece: Piece,
    origin: SquareId,
    target: SquareId,
    occupant: Piece | None,
) -> MoveResult:
    direction = pawn_direction(piece.color)
    df = target.file - origin.file
    dr = target.rank - origin.rank

    if dr * direction <= 0:
        return MoveResult.reject(ReasonCode.GEOMETRY, "pawns can only move forward")
    if is_on_missing_promotion_plane(
        target.file, target.rank, piece.color, piece_map.positions
    ):
        return MoveResult.reject(
            ReasonCode.NONEXISTENT_TARGET,
            f"no promotion square exists at {target.label} in the current board layout",
        )

    if df == 0:
        if occupant is not None:
            return MoveResult.reject(ReasonCode.BLOCKED, "pawns cannot capture forward")
        if dr == 2 * direction:
            if piece.has_moved or piece.moved_as_passenger:
                return MoveResult.reject(
                    ReasonCode.GEOMETRY, "pawns can only move two squares on their first move"
                )
            if origin.rank not in PAWN_DOUBLE_STEP_RANKS[piece.color]:
                return MoveResult.reject(
                    ReasonCode.GEOMETRY, "pawns can only move two squares from a starting rank"
                )
            middle = (origin.file, origin.rank + direction)
            if not is_column_connected(world, piece_map, middle):
                return MoveResult.reject(
                    ReasonCode.NO_CONNECTIVITY, f"no connectivity at {column_label(*middle)}"
                )
            blocker = column_blocker(
                piece_map, middle, (origin.level, target.level), exclude=piece
            )
            if blocker is not None:
                return MoveResult.reject(
                    ReasonCode.BLOCKED,
                    f"double step blocked at {column_label(*middle)} by {blocker.id}",
                )
        elif dr != direction:
            return MoveResult.reject(
                ReasonCode.GEOMETRY, "pawns move one square forward, or two on their first move"
            )
        return _check_landing(piece_map, piece, target)

    if abs(df) == 1 and dr == direction:
        if occupant is None:
            return MoveResult.reject(
                ReasonCode.GEOMETRY, "pawns can only move diagonally when capturing"
            )
        return _check_landing(piece_map, piece, target)

    return MoveResult.reject(ReasonCode.GEOMETRY, "invalid pawn move")


def _validate_knight(origin: SquareId, target: SquareId) -> MoveResult:
    # Knights jump: no path, no shadows. Level changes are free.
    df = abs(target.file - origin.file)
    dr = abs(target.rank - origin.rank)
    if (df, dr) in ((1, 2), (2, 1)):
        return MoveResult.ok()
    return MoveResult.reject(ReasonCode.GEOMETRY, "knights move in an L-shape")


def _validate_rook(
    world: World,
    piece_map: PieceMap,
    piece: Piece,
    origin: SquareId,
    target: SquareId,
) -> MoveResult:
    if origin.file != target.file and origin.rank != target.rank:
        return MoveResult.reject(
            ReasonCode.GEOMETRY, "rooks move along a single file or rank"
        )
    return _check_slide(world, piece_map, piece, origin, target)


def _is_bishop_line(origin: SquareId, target: SquareId) -> bool:
    df = abs(target.file - origin.file)
    dr = abs(target.rank - origin.rank)
    dl = abs(level_index(target.level) - level_index(origin.level))
    if df == dr and df > 0:
        return True
    # Diagonal through the stack: equal steps along one horizontal axis and levels
    return (df == dl and df > 0 and dr == 0) or (dr == dl and dr > 0 and df == 0)


def _validate_bishop(
    world: World,
    piece_map: PieceMap,
    piece: Piece,
    origin: SquareId,
    target: SquareId,
) -> MoveResult:
    if not _is_bishop_line(origin, target):
        return MoveResult.reject(ReasonCode.GEOMETRY, "bishops must move diagonally")
    if square_color(origin.file, origin.rank) != square_color(target.file, target.rank):
        return MoveResult.reject(
            ReasonCode.GEOMETRY, "bishop must stay on same color squares"
        )
    return _check_slide(world, piece_map, piece, origin, target)


def _validate_queen(
    world: World,
    piece_map: PieceMap,
    piece: Piece,
    origin: SquareId,
    target: SquareId,
) -> MoveResult:
    straight = origin.file == target.file or origin.rank == target.rank
    if not straight and not _is_bishop_line(origin, target):
        return MoveResult.reject(
            ReasonCode.GEOMETRY, "queens move along a file, rank or diagonal"
        )
    if not straight and square_color(origin.file, origin.rank) != square_color(
        target.file, target.rank
    ):
        return MoveResult.reject(
            ReasonCode.GEOMETRY, "diagonal queen moves must stay on same color squares"
        )
    return _check_slide(world, piece_map, piece, origin, target)


def _validate_king(
    piece_map: PieceMap,
    piece: Piece,
    origin: SquareId,
    target: SquareId,
) -> MoveResult:
    df = abs(target.file - origin.file)
    dr = abs(target.rank - origin.rank)
    if max(df, dr) != 1:
        return MoveResult.reject(ReasonCode.GEOMETRY, "king can only move one square")
    return _check_landing(piece_map, piece, target)


def apply_move(
    pieces: Iterable[Piece], positions: BoardPositions, piece: Piece, target: SquareId
) -> tuple[list[Piece], Piece | None]:
    """Relocate ``piece`` to ``target`` without validating the move.

    Any piece on ``target`` is removed. A pawn arriving on a corner square
    under an overhanging board records its deferred promotion.

    Returns:
        Tuple of (new piece list, captured piece or None)
    """
    moved = piece.moved_to(target.file, target.rank, piece_level_for(target.level, positions))
    if moved.type == PieceType.PAWN:
        promotion = check_promotion(moved, target.file, target.rank, positions)
        deferred = None
        if promotion.is_deferred and promotion.overhang_board is not None:
            deferred = DeferredPromotion(overhang_board=promotion.overhang_board)
        moved = replace(moved, deferred_promotion=deferred)

    captured = None
    updated = []
    for other in pieces:
        if other.id == piece.id:
            updated.append(moved)
        elif other.file == target.file and other.rank == target.rank and other.level == moved.level:
            captured = other
        else:
            updated.append(other)
    return updated, captured


def execute_move(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    piece_id: str,
    target: SquareId,
) -> tuple[list[Piece], Piece | None]:
    """Validate and apply a piece move.

    Raises:
        IllegalMoveError: If the move is not legal
        ValueError: If no piece has the given id
    """
    piece_map = PieceMap(pieces, positions)
    piece = piece_map.get(piece_id)
    if piece is None:
        raise ValueError(f"No piece with id {piece_id}")
    result = _validate(world, piece_map, piece, target)
    if not result.valid:
        logger.warning(f"Move rejected: {piece.id} to {target}: {result.reason}")
        raise IllegalMoveError(result)
    logger.debug(f"Move: {piece.id} {piece_map.square_of(piece)} -> {target}")
    return apply_move(piece_map.pieces, positions, piece, target)


def promote(pieces: Iterable[Piece], piece_id: str, new_type: PieceType) -> list[Piece]:
    """Replace a pawn by the chosen piece type.

    Raises:
        ValueError: If the piece is missing, not a pawn, or the type is not
            a valid promotion choice
    """
    if new_type not in PROMOTION_CHOICES:
        raise ValueError(f"Cannot promote to {new_type.long_name}")
    updated = []
    found = False
    for piece in pieces:
        if piece.id == piece_id:
            if piece.type != PieceType.PAWN:
                raise ValueError(f"Only pawns can promote, {piece_id} is a {piece.type.long_name}")
            piece = replace(piece, type=new_type, deferred_promotion=None)
            found = True
        updated.append(piece)
    if not found:
        raise ValueError(f"No piece with id {piece_id}")
    return updated
