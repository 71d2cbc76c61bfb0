"""Pydantic schemas for exchanging engine state with outer layers.

External game-state management hands the engine plain JSON-like data;
these models validate it and convert to and from engine types. Square
and instance ids use their text forms (``a2W``, ``QL3:180``) here and
nowhere else.
"""

from pydantic import BaseModel, Field, field_validator

from tridchess.game.engine import GameSnapshot
from tridchess.game.ids import (
    MAX_RANK,
    MIN_RANK,
    AttackBoardId,
    AttackInstance,
    Color,
    SquareId,
    Track,
)
from tridchess.game.notation import parse_piece_level
from tridchess.game.pieces import DeferredPromotion, Piece, PieceType
from tridchess.game.positions import BoardPositions, TrackState
from tridchess.game.results import MoveResult


class PieceSchema(BaseModel):
    """A piece as exchanged with outer layers."""

    id: str
    type: PieceType
    color: Color
    file: int = Field(ge=0, le=5)
    rank: int = Field(ge=MIN_RANK, le=MAX_RANK)
    level: str
    has_moved: bool = False
    moved_as_passenger: bool = False
    deferred_overhang: AttackBoardId | None = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Level must be a main board or an attack-board base id."""
        parse_piece_level(v)
        return v

    def to_engine(self) -> Piece:
        deferred = None
        if self.deferred_overhang is not None:
            deferred = DeferredPromotion(overhang_board=self.deferred_overhang)
        return Piece(
            id=self.id,
            type=self.type,
            color=self.color,
            file=self.file,
            rank=self.rank,
            level=parse_piece_level(self.level),
            has_moved=self.has_moved,
            moved_as_passenger=self.moved_as_passenger,
            deferred_promotion=deferred,
        )

    @classmethod
    def from_engine(cls, piece: Piece) -> "PieceSchema":
        overhang = piece.deferred_promotion.overhang_board if piece.deferred_promotion else None
        return cls(
            id=piece.id,
            type=piece.type,
            color=piece.color,
            file=piece.file,
            rank=piece.rank,
            level=piece.level.value,
            has_moved=piece.has_moved,
            moved_as_passenger=piece.moved_as_passenger,
            deferred_overhang=overhang,
        )


class TrackStateSchema(BaseModel):
    """Read-only per-track view of the attack boards."""

    white_pin: int | None = None
    white_rotation: int = 0
    black_pin: int | None = None
    black_rotation: int = 0

    @classmethod
    def from_engine(cls, state: TrackState) -> "TrackStateSchema":
        return cls(
            white_pin=state.white_pin,
            white_rotation=state.white_rotation.value,
            black_pin=state.black_pin,
            black_rotation=state.black_rotation.value,
        )


class SnapshotSchema(BaseModel):
    """Complete engine input state.

    ``attack_boards`` maps each base id (``WQL``...) to its active instance
    id (``QL1:0``...).
    """

    pieces: list[PieceSchema] = Field(default_factory=list)
    attack_boards: dict[str, str]
    current_turn: Color = Color.WHITE
    attack_board_activated_this_turn: bool = False
    track_states: dict[str, TrackStateSchema] = Field(default_factory=dict)

    @field_validator("attack_boards")
    @classmethod
    def validate_attack_boards(cls, v: dict[str, str]) -> dict[str, str]:
        """Every base board needs a valid, active instance id."""
        missing = {board.value for board in AttackBoardId} - set(v)
        if missing:
            raise ValueError(f"Missing attack boards: {', '.join(sorted(missing))}")
        for board, instance in v.items():
            AttackBoardId(board)
            AttackInstance.parse(instance)
        return v

    def to_engine(self) -> GameSnapshot:
        return GameSnapshot(
            pieces=tuple(p.to_engine() for p in self.pieces),
            positions=BoardPositions.from_ids(self.attack_boards),
            current_turn=self.current_turn,
            attack_board_activated_this_turn=self.attack_board_activated_this_turn,
        )

    @classmethod
    def from_engine(cls, snapshot: GameSnapshot) -> "SnapshotSchema":
        track_states = snapshot.positions.track_states()
        return cls(
            pieces=[PieceSchema.from_engine(p) for p in snapshot.pieces],
            attack_boards=snapshot.positions.to_ids(),
            current_turn=snapshot.current_turn,
            attack_board_activated_this_turn=snapshot.attack_board_activated_this_turn,
            track_states={
                track.value: TrackStateSchema.from_engine(track_states[track]) for track in Track
            },
        )


class MoveRequest(BaseModel):
    """Request to move a piece."""

    piece_id: str
    to: str

    @field_validator("to")
    @classmethod
    def validate_to(cls, v: str) -> str:
        SquareId.parse(v)
        return v

    @property
    def target(self) -> SquareId:
        return SquareId.parse(self.to)


class BoardMoveRequest(BaseModel):
    """Request to move or rotate an attack board."""

    board: AttackBoardId
    to: str
    arrival: str | None = None

    @field_validator("to")
    @classmethod
    def validate_to(cls, v: str) -> str:
        AttackInstance.parse(v)
        return v

    @field_validator("arrival")
    @classmethod
    def validate_arrival(cls, v: str | None) -> str | None:
        if v is not None and v not in ("identity", "rot180"):
            raise ValueError("Arrival must be 'identity' or 'rot180'")
        return v

    @property
    def destination(self) -> AttackInstance:
        return AttackInstance.parse(self.to)


class MoveResultSchema(BaseModel):
    """Validation outcome."""

    valid: bool
    reason: str | None = None
    code: str | None = None

    @classmethod
    def from_engine(cls, result: MoveResult) -> "MoveResultSchema":
        return cls(
            valid=result.valid,
            reason=result.reason,
            code=result.code.value if result.code else None,
        )
