"""Standard starting position."""

from tridchess.game.ids import (
    AttackBoardId,
    AttackInstance,
    Color,
    MainBoard,
    Track,
    parse_file,
)
from tridchess.game.pieces import Piece, PieceLevel, PieceType
from tridchess.game.positions import BoardPositions

# (type, square label, level) per side
WHITE_SETUP: list[tuple[PieceType, str, PieceLevel]] = [
    (PieceType.KING, "b1", MainBoard.W),
    (PieceType.QUEEN, "c1", MainBoard.W),
    (PieceType.BISHOP, "a2", MainBoard.W),
    (PieceType.KNIGHT, "b2", MainBoard.W),
    (PieceType.KNIGHT, "c2", MainBoard.W),
    (PieceType.BISHOP, "d2", MainBoard.W),
    (PieceType.PAWN, "b3", MainBoard.W),
    (PieceType.PAWN, "c3", MainBoard.W),
    (PieceType.ROOK, "z0", AttackBoardId.WQL),
    (PieceType.PAWN, "z1", AttackBoardId.WQL),
    (PieceType.PAWN, "a1", AttackBoardId.WQL),
    (PieceType.ROOK, "e0", AttackBoardId.WKL),
    (PieceType.PAWN, "d1", AttackBoardId.WKL),
    (PieceType.PAWN, "e1", AttackBoardId.WKL),
]

BLACK_SETUP: list[tuple[PieceType, str, PieceLevel]] = [
    (PieceType.PAWN, "b6", MainBoard.B),
    (PieceType.PAWN, "c6", MainBoard.B),
    (PieceType.BISHOP, "a7", MainBoard.B),
    (PieceType.KNIGHT, "b7", MainBoard.B),
    (PieceType.KNIGHT, "c7", MainBoard.B),
    (PieceType.BISHOP, "d7", MainBoard.B),
    (PieceType.QUEEN, "b8", MainBoard.B),
    (PieceType.KING, "c8", MainBoard.B),
    (PieceType.PAWN, "z8", AttackBoardId.BQL),
    (PieceType.PAWN, "a8", AttackBoardId.BQL),
    (PieceType.ROOK, "z9", AttackBoardId.BQL),
    (PieceType.PAWN, "d8", AttackBoardId.BKL),
    (PieceType.PAWN, "e8", AttackBoardId.BKL),
    (PieceType.ROOK, "e9", AttackBoardId.BKL),
]


def initial_positions() -> BoardPositions:
    return BoardPositions(
        {
            AttackBoardId.WQL: AttackInstance(Track.QL, 1),
            AttackBoardId.WKL: AttackInstance(Track.KL, 1),
            AttackBoardId.BQL: AttackInstance(Track.QL, 6),
            AttackBoardId.BKL: AttackInstance(Track.KL, 6),
        }
    )


def create_initial_pieces() -> list[Piece]:
    """Create both sides' pieces; ids look like ``white-pawn-3``."""
    pieces: list[Piece] = []
    for color, setup in ((Color.WHITE, WHITE_SETUP), (Color.BLACK, BLACK_SETUP)):
        counters: dict[PieceType, int] = {}
        for piece_type, label, level in setup:
            counters[piece_type] = counters.get(piece_type, 0) + 1
            pieces.append(
                Piece.create(
                    piece_type,
                    color=color,
                    file=parse_file(label[0]),
                    rank=int(label[1:]),
                    level=level,
                    piece_id=f"{color.value}-{piece_type.long_name}-{counters[piece_type]}",
                )
            )
    return pieces
