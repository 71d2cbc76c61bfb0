"""Game engine module for tri-dimensional chess."""

from tridchess.game.adjacency import Direction, classify_direction, is_adjacent
from tridchess.game.attack_boards import (
    BoardMoveOutcome,
    board_move_options,
    execute_board_move,
    validate_board_move,
)
from tridchess.game.castling import (
    CastleResult,
    CastleType,
    execute_castle,
    get_castling_options,
    validate_castle,
)
from tridchess.game.check import (
    is_checkmate,
    is_in_check,
    is_square_attacked,
    is_stalemate,
    legal_moves_avoiding_check,
)
from tridchess.game.engine import (
    GameEvent,
    GameEventType,
    GameSnapshot,
    GameStatus,
    RulesEngine,
    get_world,
)
from tridchess.game.geometry import BoardLayout, Pin, Square, World, build_world
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
from tridchess.game.initial_setup import create_initial_pieces, initial_positions
from tridchess.game.moves import execute_move, is_valid_move, legal_moves, promote
from tridchess.game.occupancy import can_move, controller, passengers
from tridchess.game.pieces import Piece, PieceType
from tridchess.game.positions import BoardPositions, TrackState, TrackStates
from tridchess.game.promotion import (
    ForcedPromotion,
    PromotionCheck,
    check_promotion,
    detect_forced_promotions,
    furthest_rank,
)
from tridchess.game.results import IllegalMoveError, InvariantViolation, MoveResult, ReasonCode
from tridchess.game.transform import ArrivalChoice, arrival_coordinates, arrival_options, rotate180

__all__ = [
    # Identifiers
    "AttackBoardId",
    "AttackInstance",
    "Color",
    "Level",
    "MainBoard",
    "Rotation",
    "SquareId",
    "Track",
    # Geometry
    "BoardLayout",
    "Pin",
    "Square",
    "World",
    "build_world",
    # Pieces and setup
    "Piece",
    "PieceType",
    "create_initial_pieces",
    "initial_positions",
    # Attack-board state
    "BoardPositions",
    "TrackState",
    "TrackStates",
    "Direction",
    "classify_direction",
    "is_adjacent",
    "ArrivalChoice",
    "arrival_coordinates",
    "arrival_options",
    "rotate180",
    "can_move",
    "controller",
    "passengers",
    # Moves
    "is_valid_move",
    "legal_moves",
    "execute_move",
    "promote",
    "BoardMoveOutcome",
    "board_move_options",
    "execute_board_move",
    "validate_board_move",
    # Promotion
    "ForcedPromotion",
    "PromotionCheck",
    "check_promotion",
    "detect_forced_promotions",
    "furthest_rank",
    # Castling and check
    "CastleResult",
    "CastleType",
    "execute_castle",
    "get_castling_options",
    "validate_castle",
    "is_checkmate",
    "is_in_check",
    "is_square_attacked",
    "is_stalemate",
    "legal_moves_avoiding_check",
    # Results
    "IllegalMoveError",
    "InvariantViolation",
    "MoveResult",
    "ReasonCode",
    # Engine
    "GameEvent",
    "GameEventType",
    "GameSnapshot",
    "GameStatus",
    "RulesEngine",
    "get_world",
]
