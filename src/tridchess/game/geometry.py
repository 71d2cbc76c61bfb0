"""Geometry builder for the tri-dimensional chess world.

The world is three fixed 4x4 main boards stacked vertically plus the
24 possible placements (track x pin x rotation) of the 2x2 attack
boards. It is built once and never modified; which attack-board
placements are in play is decided by ``BoardPositions``, not by flags
stored on the world.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from tridchess.game.adjacency import PinKey, adjacent_pins
from tridchess.game.ids import (
    PIN_NUMBERS,
    AttackInstance,
    Level,
    MainBoard,
    Rotation,
    SquareId,
    Track,
    level_id,
)
from tridchess.game.results import InvariantViolation

logger = logging.getLogger(__name__)

# Main board extents: files a-d, overlapping rank ranges
MAIN_FILES = (1, 2, 3, 4)
MAIN_BOARD_RANKS: dict[MainBoard, tuple[int, ...]] = {
    MainBoard.W: (1, 2, 3, 4),
    MainBoard.N: (3, 4, 5, 6),
    MainBoard.B: (5, 6, 7, 8),
}
MAIN_BOARD_Z: dict[MainBoard, float] = {
    MainBoard.W: 0.0,
    MainBoard.N: 5.0,
    MainBoard.B: 10.0,
}

# Pin dock constants, indexed by pin number
PIN_Z: dict[int, float] = {1: 1.0, 2: 2.0, 3: 4.0, 4: 6.0, 5: 8.0, 6: 9.0}
PIN_RANK_OFFSET: dict[int, int] = {1: 0, 2: 4, 3: 2, 4: 6, 5: 4, 6: 8}
TRACK_FILE_OFFSET: dict[Track, int] = {Track.QL: 0, Track.KL: 4}

# Ordinal of each z height among the nine levels, bottom to top
_ALL_HEIGHTS = sorted(set(MAIN_BOARD_Z.values()) | set(PIN_Z.values()))


class SquareColor(Enum):
    LIGHT = "light"
    DARK = "dark"


class BoardKind(Enum):
    MAIN = "main"
    ATTACK = "attack"


def square_color(file: int, rank: int) -> SquareColor:
    """Colour depends only on file and rank, so columns share one colour."""
    return SquareColor.DARK if (file + rank) % 2 == 0 else SquareColor.LIGHT


def level_z(level: Level) -> float:
    match level:
        case MainBoard():
            return MAIN_BOARD_Z[level]
        case AttackInstance():
            return PIN_Z[level.pin]
    raise TypeError(f"Unknown level: {level!r}")


def level_index(level: Level) -> int:
    """Vertical ordinal of a level: W=0, pins 1-3 = 1-3, N=4, pins 4-6 = 5-7, B=8."""
    return _ALL_HEIGHTS.index(level_z(level))


@dataclass(frozen=True)
class Pin:
    """A fixed docking position on one of the two tracks."""

    track: Track
    number: int
    file_offset: int
    rank_offset: int
    z_height: float
    adjacent: tuple[PinKey, ...]
    inverted: bool = False

    @property
    def key(self) -> PinKey:
        return (self.track, self.number)

    def __str__(self) -> str:
        return f"{self.track.value}{self.number}"


@dataclass(frozen=True)
class Square:
    """A single square with its precomputed world coordinates."""

    id: SquareId
    x: float
    y: float
    z: float
    color: SquareColor

    @property
    def file(self) -> int:
        return self.id.file

    @property
    def rank(self) -> int:
        return self.id.rank

    @property
    def level(self) -> Level:
        return self.id.level


@dataclass(frozen=True)
class BoardLayout:
    """Footprint of a main board or one attack-board instance.

    ``files`` and ``ranks`` are listed in local order: index 0 is the
    board's local origin. Rotation 180 reverses both lists, which is
    what makes local coordinates rotate with the board.

    Attributes:
        id: The level this layout describes
        kind: Main or attack board
        files: Global files in local order
        ranks: Global ranks in local order
        z_height: Height of the board surface
        rotation: Board orientation
        pin: Dock pin for attack instances, None for main boards
    """

    id: Level
    kind: BoardKind
    files: tuple[int, ...]
    ranks: tuple[int, ...]
    z_height: float
    rotation: Rotation = Rotation.R0
    pin: Pin | None = None

    @property
    def footprint(self) -> frozenset[tuple[int, int]]:
        return frozenset((f, r) for f in self.files for r in self.ranks)

    def contains(self, file: int, rank: int) -> bool:
        return file in self.files and rank in self.ranks

    def to_local(self, file: int, rank: int) -> tuple[int, int]:
        """Convert global file/rank to local indices on this board."""
        if not self.contains(file, rank):
            raise InvariantViolation(
                f"{file},{rank} is not on board {level_id(self.id)}"
            )
        return (self.files.index(file), self.ranks.index(rank))

    def to_global(self, local_file: int, local_rank: int) -> tuple[int, int]:
        return (self.files[local_file], self.ranks[local_rank])


@dataclass(frozen=True)
class World:
    """Immutable container for every square, board layout and pin.

    Attributes:
        squares: All squares keyed by id
        boards: Main boards and all 24 attack instances keyed by level
        pins: The 12 docking pins keyed by (track, number)
    """

    squares: dict[SquareId, Square]
    boards: dict[Level, BoardLayout]
    pins: dict[PinKey, Pin]

    def has_square(self, square_id: SquareId) -> bool:
        return square_id in self.squares

    def square(self, square_id: SquareId) -> Square:
        try:
            return self.squares[square_id]
        except KeyError:
            raise InvariantViolation(f"Square {square_id} does not exist") from None

    def board(self, level: Level) -> BoardLayout:
        try:
            return self.boards[level]
        except KeyError:
            raise InvariantViolation(f"Board {level_id(level)} does not exist") from None

    def pin(self, track: Track, number: int) -> Pin:
        try:
            return self.pins[(track, number)]
        except KeyError:
            raise InvariantViolation(f"Pin {track.value}{number} does not exist") from None

    def squares_on(self, level: Level) -> list[Square]:
        layout = self.board(level)
        return [self.squares[SquareId(f, r, level)] for r in layout.ranks for f in layout.files]

    @property
    def main_boards(self) -> list[BoardLayout]:
        return [self.boards[board] for board in MainBoard]


def build_pins() -> dict[PinKey, Pin]:
    pins: dict[PinKey, Pin] = {}
    for track in Track:
        for number in PIN_NUMBERS:
            pins[(track, number)] = Pin(
                track=track,
                number=number,
                file_offset=TRACK_FILE_OFFSET[track],
                rank_offset=PIN_RANK_OFFSET[number],
                z_height=PIN_Z[number],
                adjacent=adjacent_pins(track, number),
                inverted=number == 6,
            )
    return pins


def _attack_layout(pin: Pin, rotation: Rotation) -> BoardLayout:
    files = (pin.file_offset, pin.file_offset + 1)
    ranks = (pin.rank_offset, pin.rank_offset + 1)
    if rotation is Rotation.R180:
        files = files[::-1]
        ranks = ranks[::-1]
    return BoardLayout(
        id=AttackInstance(pin.track, pin.number, rotation),
        kind=BoardKind.ATTACK,
        files=files,
        ranks=ranks,
        z_height=pin.z_height,
        rotation=rotation,
        pin=pin,
    )


def build_world(square_size: float = 1.0, level_spacing: float = 1.0) -> World:
    """Build the complete static world.

    Args:
        square_size: World-space width of one square
        level_spacing: World-space distance of one unit of z height

    Returns:
        New World with 48 main squares, 24 attack instances and 12 pins
    """
    pins = build_pins()
    boards: dict[Level, BoardLayout] = {}

    for main in MainBoard:
        boards[main] = BoardLayout(
            id=main,
            kind=BoardKind.MAIN,
            files=MAIN_FILES,
            ranks=MAIN_BOARD_RANKS[main],
            z_height=MAIN_BOARD_Z[main],
        )
    for pin in pins.values():
        for rotation in Rotation:
            layout = _attack_layout(pin, rotation)
            boards[layout.id] = layout

    squares: dict[SquareId, Square] = {}
    for layout in boards.values():
        for file in layout.files:
            for rank in layout.ranks:
                square_id = SquareId(file, rank, layout.id)
                squares[square_id] = Square(
                    id=square_id,
                    x=file * square_size,
                    y=rank * square_size,
                    z=layout.z_height * level_spacing,
                    color=square_color(file, rank),
                )

    logger.debug(f"Built world: {len(squares)} squares, {len(boards)} boards, {len(pins)} pins")
    return World(squares=squares, boards=boards, pins=pins)
