"""Validation results and engine exceptions."""

from dataclasses import dataclass
from enum import Enum


class ReasonCode(Enum):
    """Category of a rejected move."""

    GEOMETRY = "E_GEOMETRY"  # shape of the move is wrong for the piece
    BLOCKED = "E_BLOCKED"
    ADJACENCY = "E_ADJACENCY"
    OCCUPANCY = "E_OCCUPANCY"
    CONTROL = "E_CONTROL"
    DIRECTION = "E_DIRECTION"
    VERTICAL_SHADOW = "E_VERTICAL_SHADOW"
    NONEXISTENT_TARGET = "E_NONEXISTENT_TARGET"
    NO_CONNECTIVITY = "E_NO_CONNECTIVITY"
    CHECK_SAFETY = "E_CHECK_SAFETY"
    ACTIVATION = "E_ACTIVATION"
    ARRIVAL_CHOICE = "E_ARRIVAL_CHOICE"
    TURN = "E_TURN"


@dataclass(frozen=True)
class MoveResult:
    """Outcome of validating a piece or attack-board move.

    Attributes:
        valid: Whether the move is legal
        reason: Human-readable explanation when invalid
        code: Machine-readable category when invalid
    """

    valid: bool
    reason: str | None = None
    code: ReasonCode | None = None

    @classmethod
    def ok(cls) -> "MoveResult":
        return cls(valid=True)

    @classmethod
    def reject(cls, code: ReasonCode, reason: str) -> "MoveResult":
        return cls(valid=False, reason=reason, code=code)


class InvariantViolation(Exception):
    """Raised when the caller hands the engine inconsistent state.

    Examples are a square, board or pin that does not exist in the world,
    or attack-board positions that do not map each base board to exactly
    one distinct pin.
    """


class IllegalMoveError(Exception):
    """Raised when an execute function is asked to apply an illegal move."""

    def __init__(self, result: MoveResult):
        super().__init__(result.reason)
        self.result = result
