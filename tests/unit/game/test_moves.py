"""Tests for piece move validation and execution."""

from dataclasses import replace

import pytest

from tridchess.game.ids import AttackBoardId, AttackInstance, MainBoard, SquareId, Track
from tridchess.game.moves import execute_move, is_valid_move, legal_moves, promote
from tridchess.game.notation import parse_position
from tridchess.game.pieces import DeferredPromotion, PieceType
from tridchess.game.positions import BoardPositions
from tridchess.game.results import IllegalMoveError, ReasonCode


def sq(text: str) -> SquareId:
    return SquareId.parse(text)


def check(world, positions, text, piece_id, target):
    pieces = parse_position(text)
    piece = next(p for p in pieces if p.id == piece_id)
    return is_valid_move(world, pieces, positions, piece, sq(target))


class TestCommonRules:
    """Tests for rules shared by every piece."""

    def test_nonexistent_square(self, world, start_positions):
        """Test moving to a square that is not in the world."""
        pieces = parse_position("wR@a1W")
        result = is_valid_move(world, pieces, start_positions, pieces[0], SquareId(0, 5, MainBoard.W))

        assert not result.valid
        assert result.code == ReasonCode.NONEXISTENT_TARGET

    def test_inactive_attack_board(self, world, start_positions):
        """Test squares on an inactive instance have no connectivity."""
        result = check(world, start_positions, "wR@a1W", "white-rook-1", "a4QL2:0")

        assert not result.valid
        assert result.code == ReasonCode.NO_CONNECTIVITY

    def test_pure_vertical_prohibited(self, world, start_positions):
        """Test no piece may move straight up or down a column."""
        for token in ["wR@b4W", "wQ@b4W", "wK@b4W"]:
            piece_id = parse_position(token)[0].id
            result = check(world, start_positions, token, piece_id, "b4N")
            assert not result.valid
            assert "pure vertical" in result.reason

    def test_own_piece_blocks_destination(self, world, start_positions):
        """Test a piece cannot land on its own side's piece."""
        result = check(world, start_positions, "wN@b1W wP@c3W", "white-knight-1", "c3W")

        assert not result.valid
        assert result.code == ReasonCode.BLOCKED


class TestPawnMoves:
    """Tests for pawn movement."""

    def test_single_step_any_level(self, world, start_positions):
        """Test a pawn may step forward onto another level."""
        assert check(world, start_positions, "wP@b2W", "white-pawn-1", "b3W").valid
        assert check(world, start_positions, "wP@b2W", "white-pawn-1", "b3N").valid

    def test_double_step(self, world, start_positions):
        """Test an unmoved pawn may advance two squares."""
        assert check(world, start_positions, "wP@b2W", "white-pawn-1", "b4N").valid

    def test_double_step_blocked_mid_path(self, world, start_positions):
        """Test a piece on the middle square blocks the double step."""
        result = check(world, start_positions, "wP@b2W bP@b3W", "white-pawn-1", "b4N")

        assert not result.valid
        assert "block" in result.reason

    def test_double_step_blocked_by_shadow(self, world, start_positions):
        """Test a piece above the middle square also blocks the double step."""
        result = check(world, start_positions, "wP@b2W bP@b3N", "white-pawn-1", "b4W")

        assert not result.valid
        assert result.code == ReasonCode.BLOCKED

    def test_double_step_ignores_knight_on_other_level(self, world, start_positions):
        """Test a knight above the middle square does not block the double step."""
        assert check(world, start_positions, "wP@b2W bN@b3N", "white-pawn-1", "b4W").valid

    def test_black_double_step_from_back_rank(self, world, start_positions):
        """Test a black pawn on rank 8 of an attack board may advance two squares."""
        assert check(world, start_positions, "bP@d8BKL", "black-pawn-1", "d6B").valid

    def test_diagonal_capture_blocked_by_shadow(self, world, start_positions):
        """Test a pawn capture is blocked by a piece on another level of the column."""
        result = check(world, start_positions, "wP@b2W bP@c3W bR@c3N", "white-pawn-1", "c3W")

        assert not result.valid
        assert result.code == ReasonCode.VERTICAL_SHADOW

    def test_double_step_after_moving(self, world, start_positions):
        """Test a moved pawn loses the double step."""
        result = check(world, start_positions, "wP*@b2W", "white-pawn-1", "b4W")

        assert not result.valid
        assert "first move" in result.reason

    def test_double_step_lost_as_passenger(self, world, start_positions):
        """Test a pawn carried by an attack board loses the double step."""
        pieces = parse_position("wP@a1WQL")
        pawn = replace(pieces[0], moved_as_passenger=True)

        assert is_valid_move(world, pieces, start_positions, pieces[0], sq("a3W")).valid
        result = is_valid_move(world, [pawn], start_positions, pawn, sq("a3W"))
        assert not result.valid

    def test_double_step_only_from_starting_ranks(self, world, start_positions):
        """Test an unmoved pawn beyond its starting ranks cannot double step."""
        result = check(world, start_positions, "wP@b3W", "white-pawn-1", "b5N")

        assert not result.valid
        assert "starting rank" in result.reason

    def test_black_moves_down(self, world, start_positions):
        """Test black pawns advance toward rank 1."""
        assert check(world, start_positions, "bP@c7B", "black-pawn-1", "c6B").valid
        assert check(world, start_positions, "bP@c7B", "black-pawn-1", "c5N").valid
        assert not check(world, start_positions, "bP@c6B", "black-pawn-1", "c7B").valid

    def test_no_backward_move(self, world, start_positions):
        """Test white pawns cannot retreat."""
        result = check(world, start_positions, "wP*@b3W", "white-pawn-1", "b2W")

        assert not result.valid
        assert "forward" in result.reason

    def test_no_forward_capture(self, world, start_positions):
        """Test pawns cannot capture straight ahead."""
        result = check(world, start_positions, "wP@b2W bP@b3W", "white-pawn-1", "b3W")

        assert not result.valid
        assert "capture forward" in result.reason

    def test_diagonal_capture_across_levels(self, world, start_positions):
        """Test diagonal captures may change level."""
        assert check(world, start_positions, "wP@b2W bN@c3N", "white-pawn-1", "c3N").valid

    def test_diagonal_requires_capture(self, world, start_positions):
        """Test pawns do not move diagonally onto empty squares."""
        result = check(world, start_positions, "wP@b2W", "white-pawn-1", "c3W")

        assert not result.valid
        assert "capturing" in result.reason

    def test_forward_into_shadow(self, world, start_positions):
        """Test a pawn cannot step under or over another piece."""
        result = check(world, start_positions, "wP@b2W bR@b3N", "white-pawn-1", "b3W")

        assert not result.valid
        assert result.code == ReasonCode.VERTICAL_SHADOW

    def test_missing_promotion_plane(self, world):
        """Test stepping onto an outer-file edge without a promotion plane."""
        positions = BoardPositions(
            {
                AttackBoardId.WQL: AttackInstance(Track.QL, 6),
                AttackBoardId.WKL: AttackInstance(Track.KL, 1),
                AttackBoardId.BQL: AttackInstance(Track.QL, 5),
                AttackBoardId.BKL: AttackInstance(Track.KL, 6),
            }
        )
        result = check(world, positions, "wP*@z8WQL", "white-pawn-1", "z9QL6:0")

        assert not result.valid
        assert result.code == ReasonCode.NONEXISTENT_TARGET

    def test_outer_file_with_plane(self, world, start_positions):
        """Test the outer-file edge exists under the opponent's far board."""
        assert check(world, start_positions, "wP*@z8BQL", "white-pawn-1", "z9QL6:0").valid


class TestKnightMoves:
    """Tests for knight movement."""

    def test_legal_moves_from_start_square(self, world, start_positions):
        """Test every L-shaped destination on every accessible level."""
        pieces = parse_position("wN@b1W")
        moves = legal_moves(world, pieces, start_positions, pieces[0])

        assert {str(m) for m in moves} == {
            "a3W",
            "a3N",
            "c3W",
            "c3N",
            "d2W",
            "d0KL1:0",
            "z0QL1:0",
        }

    def test_not_an_l(self, world, start_positions):
        """Test non-L moves are rejected."""
        assert not check(world, start_positions, "wN@b1W", "white-knight-1", "b3W").valid

    def test_ignores_shadow_at_destination(self, world, start_positions):
        """Test a knight may land in a column occupied on another level."""
        assert check(world, start_positions, "wN@b1W bR@c3N", "white-knight-1", "c3W").valid

    def test_jumps_over_pieces(self, world, start_positions):
        """Test pieces between origin and destination do not matter."""
        text = "wN@b1W wP@b2W wP@c2W bR@b3N bR@c4N"
        assert check(world, start_positions, text, "white-knight-1", "c3W").valid


class TestSlidingMoves:
    """Tests for rooks, bishops and queens."""

    def test_rook_lines(self, world, start_positions):
        """Test rooks slide along files and ranks, changing level freely."""
        assert check(world, start_positions, "wR@a1W", "white-rook-1", "a4W").valid
        assert check(world, start_positions, "wR@a1W", "white-rook-1", "d1W").valid
        assert check(world, start_positions, "wR@a1W", "white-rook-1", "a6N").valid
        assert not check(world, start_positions, "wR@a1W", "white-rook-1", "b2W").valid

    def test_rook_blocked_by_shadow(self, world, start_positions):
        """Test a piece on any level blocks the rook's path."""
        result = check(world, start_positions, "wR@a1W bP@a3N", "white-rook-1", "a4W")

        assert not result.valid
        assert result.code == ReasonCode.VERTICAL_SHADOW

    def test_rook_landing_in_shadow(self, world, start_positions):
        """Test a rook cannot land below or above another piece."""
        result = check(world, start_positions, "wR@c1W bP@c3N", "white-rook-1", "c3W")

        assert not result.valid
        assert result.code == ReasonCode.VERTICAL_SHADOW

    def test_knights_cast_no_shadow(self, world, start_positions):
        """Test a knight on another level neither blocks the path nor the landing."""
        assert check(world, start_positions, "wR@a1W bN@a3N", "white-rook-1", "a4W").valid
        assert check(world, start_positions, "wR@a1W bN@a3N", "white-rook-1", "a3W").valid

    def test_knight_on_travel_level_blocks(self, world, start_positions):
        """Test a knight physically on the path still blocks."""
        result = check(world, start_positions, "wR@a1W bN@a2W", "white-rook-1", "a4W")

        assert not result.valid
        assert result.code == ReasonCode.BLOCKED

    def test_capture_on_open_column(self, world, start_positions):
        """Test capturing when no other level of the column is occupied."""
        assert check(world, start_positions, "wR@c1W bP@c3W", "white-rook-1", "c3W").valid

    def test_capture_blocked_by_shadow(self, world, start_positions):
        """Test a piece on another level of the target column blocks a capture."""
        result = check(world, start_positions, "wR@a4N bP@c4N wP@c4W", "white-rook-1", "c4N")

        assert not result.valid
        assert result.code == ReasonCode.VERTICAL_SHADOW

    def test_no_connectivity_across_tracks(self, world, start_positions):
        """Test sliding from one track to the other through missing squares."""
        result = check(world, start_positions, "wR@z0WQL", "white-rook-1", "e0KL1:0")

        assert not result.valid
        assert result.code == ReasonCode.NO_CONNECTIVITY

    def test_bishop_diagonals(self, world, start_positions):
        """Test bishops move diagonally across levels."""
        assert check(world, start_positions, "wB@a2W", "white-bishop-1", "b3N").valid
        assert check(world, start_positions, "wB@a2W", "white-bishop-1", "d5N").valid
        result = check(world, start_positions, "wB@a2W", "white-bishop-1", "a3N")
        assert not result.valid
        assert "diagonally" in result.reason

    def test_bishop_diagonal_through_levels(self, world, start_positions):
        """Test the level diagonal: equal rank and level displacement."""
        assert check(world, start_positions, "wB@a2W", "white-bishop-1", "a6N").valid

    def test_bishop_keeps_square_color(self, world, start_positions):
        """Test a level diagonal that would change square colour is rejected."""
        result = check(world, start_positions, "wB@a1W", "white-bishop-1", "a0QL1:0")

        assert not result.valid
        assert result.reason == "bishop must stay on same color squares"

    def test_queen(self, world, start_positions):
        """Test queens combine rook and bishop movement."""
        assert check(world, start_positions, "wQ@c1W", "white-queen-1", "c4W").valid
        assert check(world, start_positions, "wQ@c1W", "white-queen-1", "a3W").valid
        assert not check(world, start_positions, "wQ@c1W", "white-queen-1", "b3W").valid


class TestKingMoves:
    """Tests for king movement."""

    def test_one_square(self, world, start_positions):
        """Test the king steps one square, changing level if needed."""
        assert check(world, start_positions, "wK@b3W", "white-king-1", "c4N").valid
        assert not check(world, start_positions, "wK@b1W", "white-king-1", "b3W").valid

    def test_shadow_blocks_destination(self, world, start_positions):
        """Test the king cannot step into a shadowed column."""
        result = check(world, start_positions, "wK@b2W bP@c3N", "white-king-1", "c3W")

        assert not result.valid
        assert result.code == ReasonCode.VERTICAL_SHADOW

    def test_captures_shadow_source(self, world, start_positions):
        """Test the king may capture the piece casting the shadow."""
        assert check(world, start_positions, "wK@b2W bP@c3N", "white-king-1", "c3N").valid


class TestExecuteMove:
    """Tests for applying piece moves."""

    def test_capture_removes_piece(self, world, start_positions):
        """Test a capture removes the target and marks the mover."""
        pieces = parse_position("wR@c1W bP@c3W")
        updated, captured = execute_move(world, pieces, start_positions, "white-rook-1", sq("c3W"))

        assert captured is not None and captured.id == "black-pawn-1"
        assert len(updated) == 1
        assert updated[0].rank == 3
        assert updated[0].has_moved is True
        # Inputs are never modified
        assert pieces[0].rank == 1

    def test_move_onto_attack_board(self, world, start_positions):
        """Test a piece landing on an instance stores the base board id."""
        pieces = parse_position("wN@b1W")
        updated, _ = execute_move(world, pieces, start_positions, "white-knight-1", sq("z0QL1:0"))

        assert updated[0].level == AttackBoardId.WQL

    def test_deferred_promotion_recorded(self, world, start_positions):
        """Test a pawn stopped by an overhang records the deferral."""
        pieces = parse_position("wP*@a7B")
        updated, _ = execute_move(world, pieces, start_positions, "white-pawn-1", sq("a8B"))

        assert updated[0].deferred_promotion == DeferredPromotion(AttackBoardId.BQL)

    def test_illegal_move_raises(self, world, start_positions):
        """Test executing an illegal move raises with the result attached."""
        pieces = parse_position("wR@a1W")

        with pytest.raises(IllegalMoveError) as exc_info:
            execute_move(world, pieces, start_positions, "white-rook-1", sq("b2W"))
        assert exc_info.value.result.code == ReasonCode.GEOMETRY

    def test_unknown_piece(self, world, start_positions):
        """Test executing a move for a missing piece."""
        with pytest.raises(ValueError, match="No piece"):
            execute_move(world, [], start_positions, "nobody", sq("b2W"))


class TestPromote:
    """Tests for replacing a promoted pawn."""

    def test_promote(self):
        """Test a pawn becomes the chosen piece."""
        pieces = promote(parse_position("wP@b8B"), "white-pawn-1", PieceType.KNIGHT)

        assert pieces[0].type == PieceType.KNIGHT

    def test_promote_invalid_type(self):
        """Test pawns cannot become kings."""
        with pytest.raises(ValueError, match="Cannot promote"):
            promote(parse_position("wP@b8B"), "white-pawn-1", PieceType.KING)

    def test_promote_non_pawn(self):
        """Test only pawns promote."""
        with pytest.raises(ValueError, match="Only pawns"):
            promote(parse_position("wR@b8B"), "white-rook-1", PieceType.QUEEN)
