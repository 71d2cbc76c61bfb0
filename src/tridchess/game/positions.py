"""Attack-board positions and piece location resolution.

``BoardPositions`` maps each attack-board base id to the instance it
currently occupies and is the single source of truth for where the
attack boards are. The set of active instances, the per-track view and
the location of every piece are all derived from it on demand.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from tridchess.game.geometry import BoardLayout, World
from tridchess.game.ids import (
    AttackBoardId,
    AttackInstance,
    Color,
    Level,
    MainBoard,
    Rotation,
    SquareId,
    Track,
)
from tridchess.game.pieces import Piece, PieceLevel
from tridchess.game.results import InvariantViolation


@dataclass(frozen=True)
class TrackState:
    """Pin and rotation of the white and black board on one track.

    A side's fields are None when none of its boards is on this track.
    """

    white_pin: int | None = None
    white_rotation: Rotation = Rotation.R0
    black_pin: int | None = None
    black_rotation: Rotation = Rotation.R0

    def pin_for(self, color: Color) -> int | None:
        return self.white_pin if color is Color.WHITE else self.black_pin

    def rotation_for(self, color: Color) -> Rotation:
        return self.white_rotation if color is Color.WHITE else self.black_rotation


@dataclass(frozen=True)
class TrackStates:
    """Per-track view of the attack boards."""

    ql: TrackState
    kl: TrackState

    def __getitem__(self, track: Track) -> TrackState:
        return self.ql if track is Track.QL else self.kl


@dataclass(frozen=True)
class BoardPositions:
    """Active instance of each attack board.

    Raises:
        InvariantViolation: On construction, unless every base board maps
            to exactly one instance and no two boards share a pin
    """

    instances: Mapping[AttackBoardId, AttackInstance]

    def __post_init__(self) -> None:
        missing = set(AttackBoardId) - set(self.instances)
        if missing:
            names = ", ".join(sorted(b.value for b in missing))
            raise InvariantViolation(f"No position for attack boards: {names}")
        pins = [instance.pin_key for instance in self.instances.values()]
        if len(set(pins)) != len(pins):
            raise InvariantViolation("Two attack boards share a pin")

    def __getitem__(self, board: AttackBoardId) -> AttackInstance:
        return self.instances[board]

    def active_instances(self) -> frozenset[AttackInstance]:
        """The four instances currently in play, one per base board."""
        return frozenset(self.instances.values())

    def is_active(self, instance: AttackInstance) -> bool:
        return instance in self.active_instances()

    def board_at(self, track: Track, pin: int) -> AttackBoardId | None:
        """Base board docked at a pin, whatever its rotation."""
        for board, instance in self.instances.items():
            if instance.track is track and instance.pin == pin:
                return board
        return None

    def base_of(self, instance: AttackInstance) -> AttackBoardId | None:
        """Base board whose active instance is exactly ``instance``."""
        for board, active in self.instances.items():
            if active == instance:
                return board
        return None

    def moved(self, board: AttackBoardId, instance: AttackInstance) -> "BoardPositions":
        """Return new positions with ``board`` relocated."""
        instances = dict(self.instances)
        instances[board] = instance
        return BoardPositions(instances)

    def track_states(self) -> TrackStates:
        states: dict[Track, dict] = {Track.QL: {}, Track.KL: {}}
        for board, instance in self.instances.items():
            side = "white" if board.owner is Color.WHITE else "black"
            slot = states[instance.track]
            # A board on its home track wins over a visitor from the other track
            if f"{side}_pin" in slot and board.home_track is not instance.track:
                continue
            slot[f"{side}_pin"] = instance.pin
            slot[f"{side}_rotation"] = instance.rotation
        return TrackStates(ql=TrackState(**states[Track.QL]), kl=TrackState(**states[Track.KL]))

    @classmethod
    def from_track_states(cls, track_states: TrackStates) -> "BoardPositions":
        """Build positions from a track view, assuming every board is on its home track."""
        instances: dict[AttackBoardId, AttackInstance] = {}
        for track in Track:
            state = track_states[track]
            for color in Color:
                pin = state.pin_for(color)
                if pin is None:
                    raise InvariantViolation(
                        f"{track.value} track state has no {color.value} board"
                    )
                instances[AttackBoardId.for_owner(color, track)] = AttackInstance(
                    track, pin, state.rotation_for(color)
                )
        return cls(instances)

    def to_ids(self) -> dict[str, str]:
        """Text form: base id to active instance id."""
        return {board.value: str(instance) for board, instance in self.instances.items()}

    @classmethod
    def from_ids(cls, mapping: Mapping[str, str]) -> "BoardPositions":
        try:
            instances = {
                AttackBoardId(board): AttackInstance.parse(instance)
                for board, instance in mapping.items()
            }
        except ValueError as e:
            raise ValueError(f"Invalid attack board positions: {e}") from None
        return cls(instances)


def active_layouts(world: World, positions: BoardPositions) -> list[BoardLayout]:
    """Main boards plus the four active attack instances."""
    layouts = world.main_boards
    layouts.extend(world.board(instance) for instance in positions.active_instances())
    return layouts


def is_accessible(level: Level, positions: BoardPositions) -> bool:
    match level:
        case MainBoard():
            return True
        case AttackInstance():
            return positions.is_active(level)
    raise TypeError(f"Unknown level: {level!r}")


def accessible_squares(world: World, positions: BoardPositions) -> list[SquareId]:
    return [
        SquareId(f, r, layout.id)
        for layout in active_layouts(world, positions)
        for r in layout.ranks
        for f in layout.files
    ]


def accessible_levels(
    world: World, positions: BoardPositions, file: int, rank: int
) -> list[Level]:
    """Levels that currently have a square at the given column."""
    return [
        layout.id
        for layout in active_layouts(world, positions)
        if layout.contains(file, rank)
    ]


def resolve_level(level: PieceLevel, positions: BoardPositions) -> Level:
    """Turn a piece's stored level into a concrete square level."""
    match level:
        case MainBoard():
            return level
        case AttackBoardId():
            return positions[level]
    raise TypeError(f"Unknown piece level: {level!r}")


def piece_level_for(level: Level, positions: BoardPositions) -> PieceLevel:
    """Turn a square level back into the level a piece stores."""
    match level:
        case MainBoard():
            return level
        case AttackInstance():
            board = positions.base_of(level)
            if board is None:
                raise InvariantViolation(f"Attack board instance {level} is not active")
            return board
    raise TypeError(f"Unknown level: {level!r}")


def square_of(piece: Piece, positions: BoardPositions) -> SquareId:
    return SquareId(piece.file, piece.rank, resolve_level(piece.level, positions))


class PieceMap:
    """Lookup tables over a piece list, built once per query.

    Attributes:
        pieces: The pieces the map was built from
        positions: Attack-board positions used to resolve levels
    """

    def __init__(self, pieces: Iterable[Piece], positions: BoardPositions):
        self.pieces = tuple(pieces)
        self.positions = positions
        self._by_square: dict[SquareId, Piece] = {}
        self._by_column: dict[tuple[int, int], list[tuple[Piece, SquareId]]] = {}
        for piece in self.pieces:
            square = square_of(piece, positions)
            self._by_square[square] = piece
            self._by_column.setdefault(square.column, []).append((piece, square))

    def __iter__(self):
        return iter(self.pieces)

    def at(self, square: SquareId) -> Piece | None:
        return self._by_square.get(square)

    def in_column(self, file: int, rank: int) -> list[tuple[Piece, SquareId]]:
        return self._by_column.get((file, rank), [])

    def square_of(self, piece: Piece) -> SquareId:
        return square_of(piece, self.positions)

    def get(self, piece_id: str) -> Piece | None:
        for piece in self.pieces:
            if piece.id == piece_id:
                return piece
        return None
