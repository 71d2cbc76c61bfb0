"""Compact text notation for piece placements."""

import re

from tridchess.game.ids import AttackBoardId, Color, MainBoard, column_label, parse_file
from tridchess.game.pieces import Piece, PieceLevel, PieceType
from tridchess.game.positions import BoardPositions, square_of

PIECE_TYPE_MAP = {
    "P": PieceType.PAWN,
    "N": PieceType.KNIGHT,
    "B": PieceType.BISHOP,
    "R": PieceType.ROOK,
    "Q": PieceType.QUEEN,
    "K": PieceType.KING,
}

COLOR_MAP = {
    "w": Color.WHITE,
    "b": Color.BLACK,
}

_TOKEN_RE = re.compile(r"^([wb])([PNBRQK])(\*?)@([zabcde])(\d)(W|N|B|WQL|WKL|BQL|BKL)$")


def parse_piece_level(text: str) -> PieceLevel:
    if text in ("W", "N", "B"):
        return MainBoard(text)
    try:
        return AttackBoardId(text)
    except ValueError:
        raise ValueError(f"Unknown board: {text}") from None


def parse_position(text: str) -> list[Piece]:
    """Parse whitespace-separated piece tokens into pieces.

    Token format: ``{colour}{type}[*]@{file}{rank}{board}``

        - colour: ``w`` or ``b``
        - type: P, N, B, R, Q, K
        - ``*`` marks a piece that has already moved
        - board: W, N, B or an attack-board base id (WQL, WKL, BQL, BKL)

    Example: ``"wK@b1W wR@e0WKL bP*@b3W"``

    Args:
        text: Tokens separated by whitespace; blank lines and ``#`` comments are ignored

    Returns:
        List of pieces with ids ``{colour}-{type}-{n}``

    Raises:
        ValueError: If a token is malformed or two pieces share a square
    """
    pieces: list[Piece] = []
    counters: dict[tuple[Color, PieceType], int] = {}
    seen: set[tuple[int, int, PieceLevel]] = set()

    for line in text.splitlines():
        line = line.split("#", 1)[0]
        for token in line.split():
            match = _TOKEN_RE.match(token)
            if match is None:
                raise ValueError(f"Invalid piece token: {token}")
            color_char, type_char, moved, letter, rank_text, board_text = match.groups()
            color = COLOR_MAP[color_char]
            piece_type = PIECE_TYPE_MAP[type_char]
            file = parse_file(letter)
            rank = int(rank_text)
            level = parse_piece_level(board_text)

            key = (file, rank, level)
            if key in seen:
                raise ValueError(f"Two pieces on {letter}{rank}{board_text}")
            seen.add(key)

            counters[(color, piece_type)] = counters.get((color, piece_type), 0) + 1
            piece = Piece.create(
                piece_type,
                color=color,
                file=file,
                rank=rank,
                level=level,
                piece_id=f"{color.value}-{piece_type.long_name}-{counters[(color, piece_type)]}",
            )
            if moved:
                piece = piece.moved_to(file, rank, level)
            pieces.append(piece)

    return pieces


def format_piece(piece: Piece) -> str:
    """Inverse of a single ``parse_position`` token."""
    color_char = "w" if piece.color is Color.WHITE else "b"
    moved = "*" if piece.has_moved else ""
    return f"{color_char}{piece.type.value}{moved}@{column_label(piece.file, piece.rank)}{piece.level.value}"


def piece_square_text(piece: Piece, positions: BoardPositions) -> str:
    """Square id text of a piece's current square, e.g. ``z0QL1:0``."""
    return str(square_of(piece, positions))
