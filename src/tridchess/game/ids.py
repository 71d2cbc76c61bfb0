"""Typed identifiers for squares, boards and attack-board instances.

Text forms only appear at the edges of the engine:

    square id:    {fileLetter}{rank}{levelId}   e.g. ``a2W``, ``z0QL1:0``
    instance id:  {track}{pin}:{rotation}       e.g. ``QL3:180``

Everything inside the engine works with the dataclasses and enums below.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum

FILE_LETTERS = "zabcde"
MIN_RANK = 0
MAX_RANK = 9
PIN_NUMBERS = (1, 2, 3, 4, 5, 6)

_INSTANCE_RE = re.compile(r"^(QL|KL)([1-6]):(0|180)$")
_SQUARE_RE = re.compile(r"^([zabcde])(\d)(.+)$")


class Color(Enum):
    """Side to move."""

    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    def __str__(self) -> str:
        return self.value


class Track(Enum):
    """Vertical rail an attack board slides along."""

    QL = "QL"  # queen's line, files z-a
    KL = "KL"  # king's line, files d-e

    @property
    def other(self) -> "Track":
        return Track.KL if self is Track.QL else Track.QL


class Rotation(Enum):
    """Orientation of an attack board on its pin."""

    R0 = 0
    R180 = 180

    @property
    def flipped(self) -> "Rotation":
        return Rotation.R180 if self is Rotation.R0 else Rotation.R0


class MainBoard(Enum):
    """The three fixed 4x4 boards."""

    W = "W"
    N = "N"
    B = "B"


class AttackBoardId(Enum):
    """Base identity of each mobile attack board."""

    WQL = "WQL"
    WKL = "WKL"
    BQL = "BQL"
    BKL = "BKL"

    @property
    def owner(self) -> Color:
        return Color.WHITE if self.value.startswith("W") else Color.BLACK

    @property
    def home_track(self) -> Track:
        return Track(self.value[1:])

    @classmethod
    def for_owner(cls, color: Color, track: Track) -> "AttackBoardId":
        prefix = "W" if color is Color.WHITE else "B"
        return cls(f"{prefix}{track.value}")


@dataclass(frozen=True)
class AttackInstance:
    """One of the 24 (track, pin, rotation) placements of an attack board."""

    track: Track
    pin: int
    rotation: Rotation = Rotation.R0

    def __post_init__(self) -> None:
        if self.pin not in PIN_NUMBERS:
            raise ValueError(f"Pin must be 1-6, got {self.pin}")

    def __str__(self) -> str:
        return f"{self.track.value}{self.pin}:{self.rotation.value}"

    @property
    def pin_key(self) -> tuple[Track, int]:
        return (self.track, self.pin)

    def rotated(self) -> "AttackInstance":
        return replace(self, rotation=self.rotation.flipped)

    @classmethod
    def parse(cls, text: str) -> "AttackInstance":
        """Parse an instance id such as ``QL3:180``.

        Raises:
            ValueError: If the text is not a valid instance id
        """
        match = _INSTANCE_RE.match(text)
        if match is None:
            raise ValueError(f"Invalid attack board instance id: {text!r}")
        track, pin, rotation = match.groups()
        return cls(Track(track), int(pin), Rotation(int(rotation)))


# A square lives either on a main board or on a concrete attack-board instance.
Level = MainBoard | AttackInstance


def level_id(level: Level) -> str:
    """Format a level as it appears inside a square id."""
    match level:
        case MainBoard():
            return level.value
        case AttackInstance():
            return str(level)
    raise TypeError(f"Unknown level: {level!r}")


def parse_level(text: str) -> Level:
    """Parse a level id (``W``, ``N``, ``B`` or an instance id)."""
    if text in ("W", "N", "B"):
        return MainBoard(text)
    return AttackInstance.parse(text)


def file_letter(file: int) -> str:
    if not 0 <= file < len(FILE_LETTERS):
        raise ValueError(f"File out of range: {file}")
    return FILE_LETTERS[file]


def parse_file(letter: str) -> int:
    index = FILE_LETTERS.find(letter)
    if index < 0 or len(letter) != 1:
        raise ValueError(f"Unknown file letter: {letter!r}")
    return index


@dataclass(frozen=True)
class SquareId:
    """Identity of a single square in the world."""

    file: int
    rank: int
    level: Level

    def __str__(self) -> str:
        return f"{file_letter(self.file)}{self.rank}{level_id(self.level)}"

    @property
    def column(self) -> tuple[int, int]:
        """The file-rank column this square belongs to."""
        return (self.file, self.rank)

    @property
    def label(self) -> str:
        """File letter and rank without the level, e.g. ``b4``."""
        return f"{file_letter(self.file)}{self.rank}"

    @classmethod
    def parse(cls, text: str) -> "SquareId":
        """Parse a square id such as ``a2W`` or ``z0QL1:0``.

        Raises:
            ValueError: If the text is not a valid square id
        """
        match = _SQUARE_RE.match(text)
        if match is None:
            raise ValueError(f"Invalid square id: {text!r}")
        letter, rank, level = match.groups()
        try:
            parsed_level = parse_level(level)
        except ValueError:
            raise ValueError(f"Invalid level in square id: {text!r}") from None
        return cls(parse_file(letter), int(rank), parsed_level)


def column_label(file: int, rank: int) -> str:
    return f"{file_letter(file)}{rank}"
