"""Pawn promotion geometry.

Where a pawn promotes depends on its file and on where the opponent's
attack boards currently sit:

- files b and c always promote on the far main-board rank (8 / 1);
- files z and e only have a promotion square (9 / 0) while the opponent's
  board on the matching track is docked at the far pin;
- files a and d promote on rank 8 / 1, unless an opponent board overhangs
  the corner from the far pin, in which case the furthest rank becomes
  9 / 0 and a pawn on 8 / 1 waits until the overhang is gone.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace

from tridchess.game.ids import AttackBoardId, Color, SquareId, Track
from tridchess.game.pieces import DeferredPromotion, Piece, PieceType
from tridchess.game.positions import BoardPositions, square_of

logger = logging.getLogger(__name__)

INTERIOR_FILES = (2, 3)  # b, c
CORNER_FILES = (1, 4)  # a, d
OUTER_FILES = (0, 5)  # z, e


@dataclass(frozen=True)
class PromotionCheck:
    """Promotion status of a pawn on a given square.

    Attributes:
        should_promote: Pawn has reached the end of its file
        can_promote: Promotion may happen now
        is_deferred: Pawn waits on an overhanging board
        overhang_board: Opponent board causing the deferral
    """

    should_promote: bool
    can_promote: bool
    is_deferred: bool = False
    overhang_board: AttackBoardId | None = None


@dataclass(frozen=True)
class ForcedPromotion:
    """A pawn that must promote immediately after an attack-board move."""

    piece_id: str
    square: SquareId


def matching_track(file: int) -> Track:
    return Track.QL if file <= 1 else Track.KL


def far_pin(color: Color) -> int:
    """Pin an opponent board must occupy to extend ``color``'s promotion edge."""
    return 6 if color is Color.WHITE else 1


def main_edge_rank(color: Color) -> int:
    return 8 if color is Color.WHITE else 1


def board_edge_rank(color: Color) -> int:
    return 9 if color is Color.WHITE else 0


def check_corner_overhang(
    file: int, color: Color, positions: BoardPositions
) -> AttackBoardId | None:
    """Opponent board docked at the far pin of the file's track, if any."""
    track = matching_track(file)
    board = positions.board_at(track, far_pin(color))
    if board is not None and board.owner is color.opponent:
        return board
    return None


def furthest_rank(file: int, color: Color, positions: BoardPositions) -> int | None:
    """Rank on which a pawn of ``color`` on ``file`` promotes.

    Returns:
        The promotion rank, or None when the file currently has no
        promotion square
    """
    if file in INTERIOR_FILES:
        return main_edge_rank(color)
    overhang = check_corner_overhang(file, color, positions)
    if file in OUTER_FILES:
        return board_edge_rank(color) if overhang is not None else None
    if file in CORNER_FILES:
        return board_edge_rank(color) if overhang is not None else main_edge_rank(color)
    raise ValueError(f"File out of range: {file}")


def promotion_square_exists(
    file: int, rank: int, color: Color, positions: BoardPositions
) -> bool:
    """Whether (file, rank) is currently a promotion square for ``color``."""
    return furthest_rank(file, color, positions) == rank


def is_on_missing_promotion_plane(
    file: int, rank: int, color: Color, positions: BoardPositions
) -> bool:
    """A z/e-file square on the board edge while no promotion plane exists there."""
    return (
        file in OUTER_FILES
        and rank == board_edge_rank(color)
        and furthest_rank(file, color, positions) is None
    )


def check_promotion(
    piece: Piece, file: int, rank: int, positions: BoardPositions
) -> PromotionCheck:
    """Promotion status of ``piece`` if it stood on (file, rank).

    Args:
        piece: The pawn (other types never promote)
        file: File to evaluate
        rank: Rank to evaluate
        positions: Current attack-board positions

    Returns:
        PromotionCheck describing the outcome
    """
    if piece.type != PieceType.PAWN:
        return PromotionCheck(should_promote=False, can_promote=False)

    if file in CORNER_FILES and rank == main_edge_rank(piece.color):
        overhang = check_corner_overhang(file, piece.color, positions)
        if overhang is not None:
            return PromotionCheck(
                should_promote=True,
                can_promote=False,
                is_deferred=True,
                overhang_board=overhang,
            )

    target = furthest_rank(file, piece.color, positions)
    if target is not None and rank == target:
        return PromotionCheck(should_promote=True, can_promote=True)
    return PromotionCheck(should_promote=False, can_promote=False)


def detect_forced_promotions(
    pieces: Iterable[Piece], positions: BoardPositions
) -> list[ForcedPromotion]:
    """Deferred pawns whose overhanging board has moved away.

    Must be run after every attack-board move.
    """
    forced = []
    for piece in pieces:
        if piece.type != PieceType.PAWN or piece.deferred_promotion is None:
            continue
        if check_corner_overhang(piece.file, piece.color, positions) is None:
            square = square_of(piece, positions)
            logger.debug(f"Forced promotion: {piece.id} at {square}")
            forced.append(ForcedPromotion(piece_id=piece.id, square=square))
    return forced


def reevaluate_passenger(
    piece: Piece, positions: BoardPositions
) -> tuple[Piece, ForcedPromotion | None]:
    """Promotion status of a pawn that was just carried by an attack board.

    Returns the pawn with its deferral updated for the new positions, and a
    ForcedPromotion when it now stands on a promotion square.
    """
    if piece.type != PieceType.PAWN:
        return piece, None
    promo = check_promotion(piece, piece.file, piece.rank, positions)
    deferred = DeferredPromotion(promo.overhang_board) if promo.is_deferred else None
    if deferred != piece.deferred_promotion:
        piece = replace(piece, deferred_promotion=deferred)
    if not promo.can_promote:
        return piece, None
    square = square_of(piece, positions)
    logger.debug(f"Passenger promotion: {piece.id} at {square}")
    return piece, ForcedPromotion(piece_id=piece.id, square=square)
