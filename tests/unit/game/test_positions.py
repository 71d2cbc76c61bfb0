"""Tests for attack-board positions and the active-instance projection."""

import pytest

from tridchess.game.ids import (
    AttackBoardId,
    AttackInstance,
    MainBoard,
    Rotation,
    SquareId,
    Track,
)
from tridchess.game.notation import parse_position
from tridchess.game.positions import (
    BoardPositions,
    accessible_levels,
    accessible_squares,
    is_accessible,
    piece_level_for,
    square_of,
)
from tridchess.game.results import InvariantViolation


class TestBoardPositions:
    """Tests for the authoritative attack-board state."""

    def test_exactly_four_active(self, start_positions):
        """Test one active instance per base board."""
        active = start_positions.active_instances()

        assert len(active) == 4
        assert {str(i) for i in active} == {"QL1:0", "KL1:0", "QL6:0", "KL6:0"}

    def test_missing_board_raises(self):
        """Test positions must cover every base board."""
        with pytest.raises(InvariantViolation, match="BKL"):
            BoardPositions(
                {
                    AttackBoardId.WQL: AttackInstance(Track.QL, 1),
                    AttackBoardId.WKL: AttackInstance(Track.KL, 1),
                    AttackBoardId.BQL: AttackInstance(Track.QL, 6),
                }
            )

    def test_shared_pin_raises(self, start_positions):
        """Test two boards cannot share a pin even with different rotations."""
        with pytest.raises(InvariantViolation):
            start_positions.moved(AttackBoardId.WKL, AttackInstance(Track.QL, 1, Rotation.R180))

    def test_moved_keeps_invariant(self, start_positions):
        """Test every update still yields four distinct active instances."""
        moved = start_positions.moved(AttackBoardId.WQL, AttackInstance(Track.QL, 2))

        assert len(moved.active_instances()) == 4
        assert moved[AttackBoardId.WQL] == AttackInstance(Track.QL, 2)
        # The original is unchanged
        assert start_positions[AttackBoardId.WQL] == AttackInstance(Track.QL, 1)

    def test_board_at_and_base_of(self, start_positions):
        """Test looking up boards by pin and by instance."""
        assert start_positions.board_at(Track.KL, 6) == AttackBoardId.BKL
        assert start_positions.board_at(Track.KL, 3) is None
        assert start_positions.base_of(AttackInstance(Track.QL, 6)) == AttackBoardId.BQL
        assert start_positions.base_of(AttackInstance(Track.QL, 6, Rotation.R180)) is None

    def test_track_state_round_trip(self, start_positions):
        """Test converting to the per-track view and back."""
        states = start_positions.track_states()

        assert states[Track.QL].white_pin == 1
        assert states[Track.QL].black_pin == 6
        assert states[Track.KL].white_rotation == Rotation.R0
        assert BoardPositions.from_track_states(states) == start_positions

    def test_track_state_cross_track(self, start_positions):
        """Test a board parked on the other track shows up there."""
        moved = start_positions.moved(AttackBoardId.WQL, AttackInstance(Track.KL, 2))
        states = moved.track_states()

        assert states[Track.QL].white_pin is None
        assert states[Track.KL].white_pin == 1  # WKL on its home track wins

    def test_ids_round_trip(self, start_positions):
        """Test the text form of positions."""
        ids = start_positions.to_ids()

        assert ids["BQL"] == "QL6:0"
        assert BoardPositions.from_ids(ids) == start_positions

    def test_from_ids_invalid(self):
        """Test malformed text positions raise ValueError."""
        with pytest.raises(ValueError):
            BoardPositions.from_ids({"WQL": "QL9:0"})


class TestAccessibility:
    """Tests for squares derived from the active instances."""

    def test_inactive_instances(self, start_positions):
        """Test only active instances are accessible."""
        assert is_accessible(MainBoard.N, start_positions)
        assert is_accessible(AttackInstance(Track.QL, 1), start_positions)
        assert not is_accessible(AttackInstance(Track.QL, 2), start_positions)
        assert not is_accessible(AttackInstance(Track.QL, 1, Rotation.R180), start_positions)

    def test_accessible_squares(self, world, start_positions):
        """Test 48 main squares plus 4 x 4 attack squares are in play."""
        assert len(accessible_squares(world, start_positions)) == 64

    def test_accessible_levels(self, world, start_positions):
        """Test which levels have a square in a column."""
        assert accessible_levels(world, start_positions, 2, 4) == [MainBoard.W, MainBoard.N]
        assert accessible_levels(world, start_positions, 1, 1) == [
            MainBoard.W,
            AttackInstance(Track.QL, 1),
        ]
        assert accessible_levels(world, start_positions, 0, 4) == []


class TestPieceLocation:
    """Tests for resolving piece levels."""

    def test_square_of_attack_board_piece(self, start_positions):
        """Test a piece on a base board resolves to the active instance."""
        (rook,) = parse_position("wR@z0WQL")

        assert str(square_of(rook, start_positions)) == "z0QL1:0"

    def test_piece_level_for(self, start_positions):
        """Test square levels map back to base ids."""
        assert piece_level_for(MainBoard.B, start_positions) == MainBoard.B
        assert piece_level_for(AttackInstance(Track.KL, 6), start_positions) == AttackBoardId.BKL

    def test_piece_level_for_inactive(self, start_positions):
        """Test an inactive instance has no base board."""
        with pytest.raises(InvariantViolation):
            piece_level_for(AttackInstance(Track.KL, 3), start_positions)

    def test_square_id_text(self, start_positions):
        """Test square ids of resolved pieces parse back."""
        (pawn,) = parse_position("bP@e8BKL")
        square = square_of(pawn, start_positions)

        assert SquareId.parse(str(square)) == square
