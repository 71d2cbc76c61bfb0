"""Attack-board movement: validation, execution and option enumeration.

A board is always docked at a pin with some rotation; a move takes it
atomically to another (pin, rotation), carrying at most one passenger.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace

from tridchess.game.adjacency import Direction, adjacent_pins, classify_direction, is_adjacent
from tridchess.game.geometry import World
from tridchess.game.ids import AttackBoardId, AttackInstance, Color, Rotation
from tridchess.game.occupancy import MAX_PASSENGERS, controller, passengers
from tridchess.game.pieces import Piece, PieceType
from tridchess.game.positions import BoardPositions, PieceMap
from tridchess.game.promotion import (
    ForcedPromotion,
    detect_forced_promotions,
    reevaluate_passenger,
)
from tridchess.game.results import IllegalMoveError, MoveResult, ReasonCode
from tridchess.game.shadow import footprint_shadow
from tridchess.game.transform import ArrivalChoice, arrival_coordinates, is_arrival_ambiguous

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardMoveOutcome:
    """Result of executing an attack-board move.

    Attributes:
        pieces: Updated piece list
        positions: Updated attack-board positions
        forced_promotions: Pawns that must promote as a result of the move
        arrival: Placement used for passengers
    """

    pieces: list[Piece]
    positions: BoardPositions
    forced_promotions: list[ForcedPromotion]
    arrival: ArrivalChoice


def validate_board_move(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    board: AttackBoardId,
    destination: AttackInstance,
    current_turn: Color | None = None,
) -> MoveResult:
    """Check whether ``board`` may move to ``destination``.

    Checks run in order and the first failure is returned: passenger
    limits, control, adjacency, destination pin availability, direction
    and finally the vertical shadow over the destination footprint.

    Args:
        world: The static world
        pieces: All pieces in play
        positions: Current attack-board positions
        board: Base id of the board to move
        destination: Target instance (track, pin and rotation)
        current_turn: Side to move; control is only checked when given

    Returns:
        MoveResult, with reason and code when invalid
    """
    pieces = list(pieces)
    origin = positions[board]
    riders = passengers(board, pieces)
    rotating = origin.rotation is not destination.rotation
    relocating = origin.pin_key != destination.pin_key

    if rotating and len(riders) > MAX_PASSENGERS:
        return _reject(
            board, ReasonCode.OCCUPANCY, "rotation requires at most one passenger"
        )
    if len(riders) > MAX_PASSENGERS:
        return _reject(
            board,
            ReasonCode.OCCUPANCY,
            f"board is occupied by {len(riders)} pieces and cannot move",
        )

    owner = controller(board, pieces)
    if current_turn is not None and owner is not current_turn:
        return _reject(
            board, ReasonCode.CONTROL, f"board is not controlled by {current_turn.value}"
        )

    if not rotating and not relocating:
        return _reject(board, ReasonCode.GEOMETRY, "board must move or rotate")
    if not relocating:
        return MoveResult.ok()

    if not is_adjacent(origin.pin_key, destination.pin_key):
        return _reject(
            board,
            ReasonCode.ADJACENCY,
            f"destination pin {destination.track.value}{destination.pin} is not adjacent",
        )

    holder = positions.board_at(destination.track, destination.pin)
    if holder is not None and holder is not board:
        return _reject(
            board,
            ReasonCode.OCCUPANCY,
            f"destination pin is occupied by {holder.value}",
        )

    if riders and owner is not None:
        direction = classify_direction(origin.pin_key, destination.pin_key, owner)
        if direction is Direction.BACKWARD:
            return _reject(
                board, ReasonCode.DIRECTION, "occupied board cannot move backward"
            )

    piece_map = PieceMap(pieces, positions)
    blocker = footprint_shadow(piece_map, world.board(destination), board)
    if blocker is not None:
        return _reject(
            board,
            ReasonCode.VERTICAL_SHADOW,
            f"destination blocked by vertical shadow of {blocker.id}",
        )

    return MoveResult.ok()


def _reject(board: AttackBoardId, code: ReasonCode, reason: str) -> MoveResult:
    logger.debug(f"Board move check failed: {board.value}: {reason}")
    return MoveResult.reject(code, reason)


def arrival_required(
    pieces: Iterable[Piece],
    positions: BoardPositions,
    board: AttackBoardId,
    destination: AttackInstance,
) -> bool:
    """Whether moving ``board`` leaves the passenger placement to the mover."""
    return bool(passengers(board, pieces)) and is_arrival_ambiguous(
        positions[board], destination
    )


def execute_board_move(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    board: AttackBoardId,
    destination: AttackInstance,
    arrival: ArrivalChoice = ArrivalChoice.IDENTITY,
    current_turn: Color | None = None,
) -> BoardMoveOutcome:
    """Validate and apply an attack-board move.

    Passengers are remapped onto the destination footprint and marked as
    moved; pawns also lose their double step. Passenger pawns are checked
    for promotion on their new squares and deferred promotions elsewhere
    are re-evaluated against the new positions.

    Raises:
        IllegalMoveError: If the move is not legal
    """
    pieces = list(pieces)
    result = validate_board_move(world, pieces, positions, board, destination, current_turn)
    if not result.valid:
        logger.warning(f"Board move rejected: {board.value} to {destination}: {result.reason}")
        raise IllegalMoveError(result)

    origin = positions[board]
    new_positions = positions.moved(board, destination)
    updated = []
    carried = []
    for piece in pieces:
        if piece.level == board:
            file, rank = arrival_coordinates(
                world, origin, destination, piece.file, piece.rank, arrival
            )
            piece = replace(
                piece,
                file=file,
                rank=rank,
                has_moved=True,
                moved_as_passenger=piece.moved_as_passenger or piece.type == PieceType.PAWN,
            )
            piece, promotion = reevaluate_passenger(piece, new_positions)
            if promotion is not None:
                carried.append(promotion)
        updated.append(piece)

    forced = carried + detect_forced_promotions(updated, new_positions)
    logger.debug(f"Board move: {board.value} {origin} -> {destination} ({arrival.value})")
    return BoardMoveOutcome(
        pieces=updated,
        positions=new_positions,
        forced_promotions=forced,
        arrival=arrival,
    )


def board_move_options(
    world: World,
    pieces: Iterable[Piece],
    positions: BoardPositions,
    board: AttackBoardId,
    current_turn: Color | None = None,
) -> list[AttackInstance]:
    """Every instance ``board`` could legally move to, including rotation in place."""
    pieces = list(pieces)
    origin = positions[board]
    candidates = [origin.rotated()]
    for track, pin in adjacent_pins(origin.track, origin.pin):
        for rotation in Rotation:
            candidates.append(AttackInstance(track, pin, rotation))

    return [
        candidate
        for candidate in candidates
        if validate_board_move(world, pieces, positions, board, candidate, current_turn).valid
    ]
