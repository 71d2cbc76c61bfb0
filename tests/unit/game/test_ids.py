"""Tests for square and instance identifiers."""

import pytest

from tridchess.game.ids import (
    AttackBoardId,
    AttackInstance,
    Color,
    MainBoard,
    Rotation,
    SquareId,
    Track,
    parse_level,
)


class TestAttackInstance:
    """Tests for attack-board instance ids."""

    def test_format(self):
        """Test instance ids format as track, pin and rotation."""
        assert str(AttackInstance(Track.QL, 3, Rotation.R180)) == "QL3:180"
        assert str(AttackInstance(Track.KL, 1)) == "KL1:0"

    def test_parse(self):
        """Test parsing an instance id."""
        instance = AttackInstance.parse("KL6:180")

        assert instance.track == Track.KL
        assert instance.pin == 6
        assert instance.rotation == Rotation.R180

    @pytest.mark.parametrize("text", ["QL7:0", "QL1:90", "XL1:0", "QL1", ""])
    def test_parse_invalid(self, text):
        """Test malformed instance ids are rejected."""
        with pytest.raises(ValueError):
            AttackInstance.parse(text)

    def test_pin_out_of_range(self):
        """Test constructing an instance with an invalid pin."""
        with pytest.raises(ValueError, match="Pin must be 1-6"):
            AttackInstance(Track.QL, 0)

    def test_rotated(self):
        """Test flipping rotation keeps track and pin."""
        instance = AttackInstance(Track.QL, 2).rotated()

        assert instance == AttackInstance(Track.QL, 2, Rotation.R180)
        assert instance.rotated() == AttackInstance(Track.QL, 2)


class TestSquareId:
    """Tests for square ids."""

    def test_format_main_board(self):
        """Test a main-board square id."""
        assert str(SquareId(1, 2, MainBoard.W)) == "a2W"

    def test_format_attack_board(self):
        """Test an attack-board square id embeds the instance id."""
        square = SquareId(0, 0, AttackInstance(Track.QL, 1))

        assert str(square) == "z0QL1:0"

    def test_parse_main_board(self):
        """Test parsing a main-board square id."""
        square = SquareId.parse("d7B")

        assert square.file == 4
        assert square.rank == 7
        assert square.level == MainBoard.B

    def test_parse_attack_board(self):
        """Test parsing an attack-board square id."""
        square = SquareId.parse("e9KL6:180")

        assert square == SquareId(5, 9, AttackInstance(Track.KL, 6, Rotation.R180))

    @pytest.mark.parametrize("text", ["f1W", "a1X", "a1QL9:0", "a", "1aW"])
    def test_parse_invalid(self, text):
        """Test malformed square ids are rejected."""
        with pytest.raises(ValueError):
            SquareId.parse(text)

    def test_column_and_label(self):
        """Test column and label ignore the level."""
        square = SquareId.parse("b4N")

        assert square.column == (2, 4)
        assert square.label == "b4"


class TestBoardIds:
    """Tests for board and colour enums."""

    def test_attack_board_owner_and_track(self):
        """Test base ids know their owner and home track."""
        assert AttackBoardId.WQL.owner == Color.WHITE
        assert AttackBoardId.BKL.owner == Color.BLACK
        assert AttackBoardId.BQL.home_track == Track.QL
        assert AttackBoardId.WKL.home_track == Track.KL

    def test_for_owner(self):
        """Test looking up a board by owner and track."""
        assert AttackBoardId.for_owner(Color.BLACK, Track.KL) == AttackBoardId.BKL

    def test_opponent(self):
        """Test colour opponents."""
        assert Color.WHITE.opponent == Color.BLACK
        assert Color.BLACK.opponent == Color.WHITE

    def test_parse_level(self):
        """Test parsing levels of both kinds."""
        assert parse_level("N") == MainBoard.N
        assert parse_level("QL2:0") == AttackInstance(Track.QL, 2)
