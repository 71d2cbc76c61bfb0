"""Castling on the attack boards.

Kingside castling swaps king and rook on a single attack board (either
track); queenside castling swaps them across the two bridge boards.
Both require the boards to be at their starting pin and controlled by
the castling side, an unmoved king and rook on the back rank, and that
neither the king's square nor its destination is attacked.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum

from tridchess.game.check import is_in_check, is_square_attacked
from tridchess.game.geometry import World
from tridchess.game.ids import AttackBoardId, AttackInstance, Color, SquareId, Track
from tridchess.game.occupancy import passengers
from tridchess.game.pieces import Piece, PieceType
from tridchess.game.positions import BoardPositions, PieceMap
from tridchess.game.results import IllegalMoveError, MoveResult, ReasonCode

logger = logging.getLogger(__name__)


class CastleType(Enum):
    KINGSIDE_QL = "kingside-ql"
    KINGSIDE_KL = "kingside-kl"
    QUEENSIDE = "queenside"


@dataclass(frozen=True)
class CastleResult:
    """Outcome of validating a castle.

    Attributes:
        valid: Whether castling is legal
        reason: Explanation when invalid
        code: Reason category when invalid
        king_id: Castling king
        rook_id: Castling rook
        king_from: King's square before castling
        king_to: King's square after castling (the rook's square)
        rook_from: Rook's square before castling
        rook_to: Rook's square after castling (the king's square)
        involved_boards: Attack-board instances taking part
    """

    valid: bool
    reason: str | None = None
    code: ReasonCode | None = None
    king_id: str | None = None
    rook_id: str | None = None
    king_from: SquareId | None = None
    king_to: SquareId | None = None
    rook_from: SquareId | None = None
    rook_to: SquareId | None = None
    involved_boards: tuple[AttackInstance, ...] = field(default_factory=tuple)


def start_pin(color: Color) -> int:
    return 1 if color is Color.WHITE else 6


def back_rank(color: Color) -> int:
    return 0 if color is Color.WHITE else 9


def _reject(castle_type: CastleType, color: Color, code: ReasonCode, reason: str) -> CastleResult:
    logger.debug(f"Castling check failed: {color.value} {castle_type.value}: {reason}")
    return CastleResult(valid=False, reason=reason, code=code)


def _board_ready(
    board: AttackBoardId,
    color: Color,
    pieces: list[Piece],
    positions: BoardPositions,
) -> str | None:
    instance = positions[board]
    if instance.track is not board.home_track or instance.pin != start_pin(color):
        return f"{board.home_track.value} board not at starting position"
    # No enemy piece aboard; the castling pair itself may ride the board.
    if board.owner is not color or any(p.color is not color for p in passengers(board, pieces)):
        return f"{board.home_track.value} board not controlled by {color.value}"
    return None


def _find_on(
    pieces: list[Piece], piece_type: PieceType, color: Color, boards: tuple[AttackBoardId, ...]
) -> Piece | None:
    for piece in pieces:
        if (
            piece.type == piece_type
            and piece.color == color
            and piece.level in boards
            and piece.rank == back_rank(color)
        ):
            return piece
    return None


def validate_castle(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    color: Color,
    castle_type: CastleType,
    attack_board_activated_this_turn: bool = False,
) -> CastleResult:
    """Check whether ``color`` may castle.

    Args:
        world: The static world
        pieces: All pieces in play
        positions: Current attack-board positions
        color: Castling side
        castle_type: Which castle to attempt
        attack_board_activated_this_turn: An attack board already moved this turn

    Returns:
        CastleResult with the king and rook squares when valid
    """
    pieces = list(pieces)
    if attack_board_activated_this_turn:
        return _reject(
            castle_type, color, ReasonCode.ACTIVATION, "Cannot castle after attack board activation"
        )
    if is_in_check(world, pieces, positions, color):
        return _reject(castle_type, color, ReasonCode.CHECK_SAFETY, "Cannot castle while in check")

    match castle_type:
        case CastleType.KINGSIDE_QL | CastleType.KINGSIDE_KL:
            track = Track.QL if castle_type is CastleType.KINGSIDE_QL else Track.KL
            boards = (AttackBoardId.for_owner(color, track),)
        case CastleType.QUEENSIDE:
            boards = (
                AttackBoardId.for_owner(color, Track.QL),
                AttackBoardId.for_owner(color, Track.KL),
            )

    for board in boards:
        problem = _board_ready(board, color, pieces, positions)
        if problem is not None:
            return _reject(castle_type, color, ReasonCode.CONTROL, problem)

    king = _find_on(pieces, PieceType.KING, color, boards)
    rook = _find_on(pieces, PieceType.ROOK, color, boards)
    if castle_type is CastleType.QUEENSIDE and king is not None:
        other = tuple(b for b in boards if b != king.level)
        rook = _find_on(pieces, PieceType.ROOK, color, other) or rook
    where = "bridge boards" if len(boards) > 1 else str(positions[boards[0]])
    if king is None:
        return _reject(castle_type, color, ReasonCode.GEOMETRY, f"King not found on {where}")
    if rook is None:
        return _reject(castle_type, color, ReasonCode.GEOMETRY, f"Rook not found on {where}")
    if castle_type is CastleType.QUEENSIDE and king.level == rook.level:
        return _reject(
            castle_type,
            color,
            ReasonCode.GEOMETRY,
            "King and rook must be on opposite bridge boards for queenside castle",
        )
    if king.has_moved:
        return _reject(castle_type, color, ReasonCode.GEOMETRY, "King has already moved")
    if rook.has_moved:
        return _reject(castle_type, color, ReasonCode.GEOMETRY, "Rook has already moved")

    piece_map = PieceMap(pieces, positions)
    king_square = piece_map.square_of(king)
    rook_square = piece_map.square_of(rook)
    if is_square_attacked(world, piece_map, positions, king_square, color.opponent):
        return _reject(castle_type, color, ReasonCode.CHECK_SAFETY, "King is in check")
    if is_square_attacked(world, piece_map, positions, rook_square, color.opponent):
        return _reject(
            castle_type,
            color,
            ReasonCode.CHECK_SAFETY,
            "King destination square is attacked",
        )

    return CastleResult(
        valid=True,
        king_id=king.id,
        rook_id=rook.id,
        king_from=king_square,
        king_to=rook_square,
        rook_from=rook_square,
        rook_to=king_square,
        involved_boards=tuple(positions[board] for board in boards),
    )


def get_castling_options(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    color: Color,
    current_turn: Color,
    attack_board_activated_this_turn: bool = False,
) -> list[CastleType]:
    """Castle types currently available to ``color``."""
    if color is not current_turn or attack_board_activated_this_turn:
        return []
    pieces = list(pieces)
    return [
        castle_type
        for castle_type in CastleType
        if validate_castle(world, pieces, positions, color, castle_type).valid
    ]


def execute_castle(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    color: Color,
    castle_type: CastleType,
    attack_board_activated_this_turn: bool = False,
) -> list[Piece]:
    """Validate and perform a castle by swapping king and rook.

    Raises:
        IllegalMoveError: If the castle is not legal
    """
    pieces = list(pieces)
    result = validate_castle(
        world, pieces, positions, color, castle_type, attack_board_activated_this_turn
    )
    if not result.valid:
        logger.warning(f"Castling rejected: {color.value} {castle_type.value}: {result.reason}")
        raise IllegalMoveError(MoveResult.reject(result.code, result.reason))

    king = next(p for p in pieces if p.id == result.king_id)
    rook = next(p for p in pieces if p.id == result.rook_id)
    updated = []
    for piece in pieces:
        if piece.id == king.id:
            piece = replace(piece, file=rook.file, rank=rook.rank, level=rook.level, has_moved=True)
        elif piece.id == rook.id:
            piece = replace(piece, file=king.file, rank=king.rank, level=king.level, has_moved=True)
        updated.append(piece)
    logger.debug(f"Castled: {color.value} {castle_type.value}")
    return updated

