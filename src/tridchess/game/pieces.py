"""Piece definitions."""

from dataclasses import dataclass, replace
from enum import Enum

from tridchess.game.ids import AttackBoardId, Color, MainBoard

# Pieces sit on a main board or on an attack board's base id; the base id
# is resolved to its active instance through BoardPositions.
PieceLevel = MainBoard | AttackBoardId


class PieceType(Enum):
    """Chess piece types."""

    PAWN = "P"
    KNIGHT = "N"
    BISHOP = "B"
    ROOK = "R"
    QUEEN = "Q"
    KING = "K"

    def __str__(self) -> str:
        return self.value

    @property
    def long_name(self) -> str:
        return self.name.lower()


PROMOTION_CHOICES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)


@dataclass(frozen=True)
class DeferredPromotion:
    """A pawn on its promotion rank waiting for an overhanging board to leave.

    Attributes:
        overhang_board: The opponent attack board blocking promotion
    """

    overhang_board: AttackBoardId


@dataclass(frozen=True)
class Piece:
    """A chess piece.

    Pieces are immutable; every engine operation returns new instances.

    Attributes:
        id: Unique identifier
        type: Piece type
        color: Owning side
        file: File index 0-5 (z..e)
        rank: Rank 0-9
        level: Main board or attack-board base id
        has_moved: Whether the piece has moved (castling, pawn double step)
        moved_as_passenger: Pawn was carried by an attack board
        deferred_promotion: Set while promotion waits on an overhang
    """

    id: str
    type: PieceType
    color: Color
    file: int
    rank: int
    level: PieceLevel
    has_moved: bool = False
    moved_as_passenger: bool = False
    deferred_promotion: DeferredPromotion | None = None

    @classmethod
    def create(
        cls,
        piece_type: PieceType,
        color: Color,
        file: int,
        rank: int,
        level: PieceLevel,
        piece_id: str | None = None,
    ) -> "Piece":
        """Create a piece, deriving an id from its starting square if none is given."""
        if piece_id is None:
            piece_id = f"{piece_type.value}:{color.value}:{file}:{rank}:{level.value}"
        return cls(
            id=piece_id,
            type=piece_type,
            color=color,
            file=file,
            rank=rank,
            level=level,
        )

    @property
    def is_knight(self) -> bool:
        return self.type == PieceType.KNIGHT

    @property
    def on_attack_board(self) -> bool:
        return isinstance(self.level, AttackBoardId)

    def moved_to(self, file: int, rank: int, level: PieceLevel) -> "Piece":
        """Return a copy relocated by a regular move."""
        return replace(self, file=file, rank=rank, level=level, has_moved=True)

    def __str__(self) -> str:
        return f"{self.color.value} {self.type.long_name} ({self.id})"
