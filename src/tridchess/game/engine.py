"""Rules engine facade for tri-dimensional chess.

``RulesEngine`` ties the individual rule modules together around an
immutable ``GameSnapshot``. Every method returns a new snapshot along
with the events the action produced; the snapshot passed in is never
modified.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import lru_cache

from tridchess.game.attack_boards import (
    arrival_required,
    board_move_options,
    execute_board_move,
    validate_board_move,
)
from tridchess.game.castling import CastleType, execute_castle, get_castling_options
from tridchess.game.check import (
    has_safe_move,
    is_in_check,
    legal_moves_avoiding_check,
    simulate_move,
)
from tridchess.game.geometry import World, build_world
from tridchess.game.ids import AttackBoardId, AttackInstance, Color, SquareId
from tridchess.game.initial_setup import create_initial_pieces, initial_positions
from tridchess.game.moves import execute_move, is_valid_move, promote
from tridchess.game.pieces import Piece, PieceType
from tridchess.game.positions import BoardPositions, square_of
from tridchess.game.promotion import check_promotion
from tridchess.game.results import IllegalMoveError, MoveResult, ReasonCode
from tridchess.game.transform import ArrivalChoice
from tridchess.settings import get_settings

logger = logging.getLogger(__name__)


class GameStatus(Enum):
    """Position status for the side to move."""

    ONGOING = "ongoing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


class GameEventType(Enum):
    """Types of events produced by engine actions."""

    MOVE = "move"
    CAPTURE = "capture"
    BOARD_MOVE = "board_move"
    PROMOTION = "promotion"
    PROMOTION_DEFERRED = "promotion_deferred"
    FORCED_PROMOTION = "forced_promotion"
    CASTLE = "castle"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


@dataclass
class GameEvent:
    """An event produced by an engine action.

    Attributes:
        type: Type of event
        data: Event-specific data
    """

    type: GameEventType
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class GameSnapshot:
    """Caller-owned game state passed into every engine call.

    Attributes:
        pieces: All pieces in play
        positions: Attack-board positions
        current_turn: Side to move
        attack_board_activated_this_turn: An attack board moved earlier this turn
    """

    pieces: tuple[Piece, ...]
    positions: BoardPositions
    current_turn: Color = Color.WHITE
    attack_board_activated_this_turn: bool = False

    def get_piece(self, piece_id: str) -> Piece | None:
        for piece in self.pieces:
            if piece.id == piece_id:
                return piece
        return None

    def square_of(self, piece: Piece) -> SquareId:
        return square_of(piece, self.positions)


@lru_cache
def get_world() -> World:
    """The shared, immutable world built from configured settings."""
    settings = get_settings()
    return build_world(square_size=settings.square_size, level_spacing=settings.level_spacing)


class RulesEngine:
    """Query and command surface of the engine.

    All methods are static and pure; pass the returned snapshot to the
    next call.
    """

    @staticmethod
    def create_game() -> GameSnapshot:
        """Create a game in the standard starting position."""
        return GameSnapshot(
            pieces=tuple(create_initial_pieces()),
            positions=initial_positions(),
        )

    @staticmethod
    def legal_moves(snapshot: GameSnapshot, piece_id: str) -> list[SquareId]:
        """Moves for a piece that keep its king safe, sorted by square id text."""
        piece = RulesEngine._require_piece(snapshot, piece_id)
        moves = legal_moves_avoiding_check(get_world(), snapshot.pieces, snapshot.positions, piece)
        return sorted(moves, key=str)

    @staticmethod
    def validate_move(snapshot: GameSnapshot, piece_id: str, target: SquareId) -> MoveResult:
        """Check a piece move, including turn order and own-king safety."""
        piece = RulesEngine._require_piece(snapshot, piece_id)
        if piece.color is not snapshot.current_turn:
            return MoveResult.reject(ReasonCode.TURN, f"It is {snapshot.current_turn.value}'s turn")

        world = get_world()
        result = is_valid_move(world, snapshot.pieces, snapshot.positions, piece, target)
        if not result.valid:
            return result

        after = simulate_move(snapshot.pieces, snapshot.positions, piece, target)
        if is_in_check(world, after, snapshot.positions, piece.color):
            return MoveResult.reject(ReasonCode.CHECK_SAFETY, "move would leave king in check")
        return result

    @staticmethod
    def apply_move(
        snapshot: GameSnapshot,
        piece_id: str,
        target: SquareId,
        promote_to: PieceType = PieceType.QUEEN,
    ) -> tuple[GameSnapshot, list[GameEvent]]:
        """Apply a piece move and pass the turn.

        Pawns reaching a promotion square become ``promote_to``; pawns
        stopped by an overhang are flagged and promote later.

        Raises:
            IllegalMoveError: If the move is not legal
        """
        result = RulesEngine.validate_move(snapshot, piece_id, target)
        if not result.valid:
            logger.warning(f"Move rejected: {piece_id} to {target}: {result.reason}")
            raise IllegalMoveError(result)

        world = get_world()
        origin = snapshot.square_of(RulesEngine._require_piece(snapshot, piece_id))
        pieces, captured = execute_move(
            world, snapshot.pieces, snapshot.positions, piece_id, target
        )
        events = [
            GameEvent(
                type=GameEventType.MOVE,
                data={"piece_id": piece_id, "from": str(origin), "to": str(target)},
            )
        ]
        if captured is not None:
            events.append(
                GameEvent(
                    type=GameEventType.CAPTURE,
                    data={"piece_id": captured.id, "by": piece_id, "square": str(target)},
                )
            )

        moved = next(p for p in pieces if p.id == piece_id)
        promotion = check_promotion(moved, target.file, target.rank, snapshot.positions)
        if promotion.can_promote:
            pieces = promote(pieces, piece_id, promote_to)
            events.append(
                GameEvent(
                    type=GameEventType.PROMOTION,
                    data={"piece_id": piece_id, "to_type": promote_to.value},
                )
            )
        elif promotion.is_deferred and promotion.overhang_board is not None:
            events.append(
                GameEvent(
                    type=GameEventType.PROMOTION_DEFERRED,
                    data={"piece_id": piece_id, "overhang_board": promotion.overhang_board.value},
                )
            )

        next_snapshot = GameSnapshot(
            pieces=tuple(pieces),
            positions=snapshot.positions,
            current_turn=snapshot.current_turn.opponent,
        )
        events.extend(RulesEngine._status_events(next_snapshot))
        return next_snapshot, events

    @staticmethod
    def validate_board_move(
        snapshot: GameSnapshot, board: AttackBoardId, destination: AttackInstance
    ) -> MoveResult:
        return validate_board_move(
            get_world(),
            snapshot.pieces,
            snapshot.positions,
            board,
            destination,
            current_turn=snapshot.current_turn,
        )

    @staticmethod
    def board_move_options(snapshot: GameSnapshot, board: AttackBoardId) -> list[AttackInstance]:
        return board_move_options(
            get_world(),
            snapshot.pieces,
            snapshot.positions,
            board,
            current_turn=snapshot.current_turn,
        )

    @staticmethod
    def apply_board_move(
        snapshot: GameSnapshot,
        board: AttackBoardId,
        destination: AttackInstance,
        arrival: ArrivalChoice | None = None,
        end_turn: bool = True,
    ) -> tuple[GameSnapshot, list[GameEvent]]:
        """Move an attack board.

        Pawns carried onto a promotion square and deferred pawns released
        by the move are promoted to queens immediately.

        Args:
            snapshot: Current state
            board: Board to move
            destination: Target instance
            arrival: Passenger placement when the board changes rotation
            end_turn: Pass the turn; otherwise keep it and mark the
                activation, which rules out castling for the rest of the turn

        Raises:
            IllegalMoveError: If the move is not legal or an arrival choice
                is required but missing
        """
        settings = get_settings()
        if arrival is None:
            if settings.require_explicit_arrival and arrival_required(
                snapshot.pieces, snapshot.positions, board, destination
            ):
                result = MoveResult.reject(
                    ReasonCode.ARRIVAL_CHOICE,
                    "rotating an occupied board requires an arrival choice",
                )
                logger.warning(f"Board move rejected: {board.value}: {result.reason}")
                raise IllegalMoveError(result)
            arrival = ArrivalChoice(settings.default_arrival_choice)

        outcome = execute_board_move(
            get_world(),
            snapshot.pieces,
            snapshot.positions,
            board,
            destination,
            arrival=arrival,
            current_turn=snapshot.current_turn,
        )
        events = [
            GameEvent(
                type=GameEventType.BOARD_MOVE,
                data={
                    "board": board.value,
                    "from": str(snapshot.positions[board]),
                    "to": str(destination),
                    "arrival": outcome.arrival.value,
                },
            )
        ]

        pieces = outcome.pieces
        for forced in outcome.forced_promotions:
            pieces = promote(pieces, forced.piece_id, PieceType.QUEEN)
            events.append(
                GameEvent(
                    type=GameEventType.FORCED_PROMOTION,
                    data={"piece_id": forced.piece_id, "square": str(forced.square)},
                )
            )

        if end_turn:
            next_snapshot = GameSnapshot(
                pieces=tuple(pieces),
                positions=outcome.positions,
                current_turn=snapshot.current_turn.opponent,
            )
        else:
            next_snapshot = replace(
                snapshot,
                pieces=tuple(pieces),
                positions=outcome.positions,
                attack_board_activated_this_turn=True,
            )
        events.extend(RulesEngine._status_events(next_snapshot))
        return next_snapshot, events

    @staticmethod
    def castling_options(snapshot: GameSnapshot, color: Color | None = None) -> list[CastleType]:
        color = color or snapshot.current_turn
        return get_castling_options(
            get_world(),
            snapshot.pieces,
            snapshot.positions,
            color,
            snapshot.current_turn,
            snapshot.attack_board_activated_this_turn,
        )

    @staticmethod
    def castle(
        snapshot: GameSnapshot, castle_type: CastleType
    ) -> tuple[GameSnapshot, list[GameEvent]]:
        """Castle for the side to move and pass the turn.

        Raises:
            IllegalMoveError: If castling is not legal
        """
        pieces = execute_castle(
            get_world(),
            snapshot.pieces,
            snapshot.positions,
            snapshot.current_turn,
            castle_type,
            snapshot.attack_board_activated_this_turn,
        )
        next_snapshot = GameSnapshot(
            pieces=tuple(pieces),
            positions=snapshot.positions,
            current_turn=snapshot.current_turn.opponent,
        )
        events = [
            GameEvent(
                type=GameEventType.CASTLE,
                data={"color": snapshot.current_turn.value, "castle_type": castle_type.value},
            )
        ]
        events.extend(RulesEngine._status_events(next_snapshot))
        return next_snapshot, events

    @staticmethod
    def status(snapshot: GameSnapshot) -> GameStatus:
        """Check, checkmate or stalemate for the side to move."""
        world = get_world()
        color = snapshot.current_turn
        in_check = is_in_check(world, snapshot.pieces, snapshot.positions, color)
        if has_safe_move(world, snapshot.pieces, snapshot.positions, color):
            return GameStatus.CHECK if in_check else GameStatus.ONGOING
        return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE

    @staticmethod
    def _status_events(snapshot: GameSnapshot) -> list[GameEvent]:
        status = RulesEngine.status(snapshot)
        data = {"color": snapshot.current_turn.value}
        match status:
            case GameStatus.CHECK:
                return [GameEvent(type=GameEventType.CHECK, data=data)]
            case GameStatus.CHECKMATE:
                return [GameEvent(type=GameEventType.CHECKMATE, data=data)]
            case GameStatus.STALEMATE:
                return [GameEvent(type=GameEventType.STALEMATE, data=data)]
        return []

    @staticmethod
    def _require_piece(snapshot: GameSnapshot, piece_id: str) -> Piece:
        piece = snapshot.get_piece(piece_id)
        if piece is None:
            raise ValueError(f"No piece with id {piece_id}")
        return piece
