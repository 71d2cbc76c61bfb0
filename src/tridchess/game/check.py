"""Attack, check, checkmate and stalemate detection."""

from collections.abc import Iterable

from tridchess.game.geometry import World
from tridchess.game.ids import Color, SquareId
from tridchess.game.moves import apply_move, is_valid_move, legal_moves, pawn_direction
from tridchess.game.pieces import Piece, PieceType
from tridchess.game.positions import BoardPositions, PieceMap, is_accessible


def _attacks(world: World, piece_map: PieceMap, attacker: Piece, square: SquareId) -> bool:
    if attacker.type == PieceType.PAWN:
        # Pawns attack diagonally forward whether or not the square is occupied.
        origin = piece_map.square_of(attacker)
        return (
            world.has_square(square)
            and is_accessible(square.level, piece_map.positions)
            and abs(square.file - origin.file) == 1
            and square.rank - origin.rank == pawn_direction(attacker.color)
        )
    return is_valid_move(world, piece_map, piece_map.positions, attacker, square).valid


def is_square_attacked(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    square: SquareId,
    by_color: Color,
) -> bool:
    """Whether any piece of ``by_color`` could move to (or capture on) ``square``.

    Own-king safety of the attacker is not considered.
    """
    piece_map = pieces if isinstance(pieces, PieceMap) else PieceMap(pieces, positions)
    for attacker in piece_map.pieces:
        if attacker.color != by_color:
            continue
        if _attacks(world, piece_map, attacker, square):
            return True
    return False


def find_king(pieces: Iterable[Piece], color: Color) -> Piece | None:
    for piece in pieces:
        if piece.type == PieceType.KING and piece.color == color:
            return piece
    return None


def is_in_check(
    world: World, pieces: Iterable[Piece], positions: BoardPositions, color: Color
) -> bool:
    """Whether ``color``'s king is attacked. A side without a king is never in check."""
    pieces = list(pieces)
    king = find_king(pieces, color)
    if king is None:
        return False
    piece_map = PieceMap(pieces, positions)
    return is_square_attacked(
        world, piece_map, positions, piece_map.square_of(king), color.opponent
    )


def simulate_move(
    pieces: Iterable[Piece], positions: BoardPositions, piece: Piece, target: SquareId
) -> list[Piece]:
    """Pieces after moving ``piece`` to ``target``, capturing anything there."""
    updated, _captured = apply_move(pieces, positions, piece, target)
    return updated


def legal_moves_avoiding_check(
    world: World, pieces: Iterable[Piece], positions: BoardPositions, piece: Piece
) -> set[SquareId]:
    """Legal moves of ``piece`` that do not leave its own king in check."""
    pieces = list(pieces)
    safe = set()
    for target in legal_moves(world, pieces, positions, piece):
        after = simulate_move(pieces, positions, piece, target)
        if not is_in_check(world, after, positions, piece.color):
            safe.add(target)
    return safe


def has_safe_move(
    world: World, pieces: Iterable[Piece], positions: BoardPositions, color: Color
) -> bool:
    pieces = list(pieces)
    for piece in pieces:
        if piece.color != color:
            continue
        if legal_moves_avoiding_check(world, pieces, positions, piece):
            return True
    return False


def is_checkmate(
    world: World, pieces: Iterable[Piece], positions: BoardPositions, color: Color
) -> bool:
    pieces = list(pieces)
    return is_in_check(world, pieces, positions, color) and not has_safe_move(
        world, pieces, positions, color
    )


def is_stalemate(
    world: World, pieces: Iterable[Piece], positions: BoardPositions, color: Color
) -> bool:
    pieces = list(pieces)
    return not is_in_check(world, pieces, positions, color) and not has_safe_move(
        world, pieces, positions, color
    )
