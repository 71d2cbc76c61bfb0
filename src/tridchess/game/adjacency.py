"""Static pin adjacency graph and move-direction classification."""

from enum import Enum

from tridchess.game.ids import PIN_NUMBERS, Color, Track

PinKey = tuple[Track, int]


def _build_adjacency() -> dict[PinKey, tuple[PinKey, ...]]:
    # Pin n reaches n-1 and n+1 on its own track, and n-1, n, n+1 across.
    graph: dict[PinKey, tuple[PinKey, ...]] = {}
    for track in Track:
        for pin in PIN_NUMBERS:
            neighbours: list[PinKey] = []
            for step in (-1, 1):
                if pin + step in PIN_NUMBERS:
                    neighbours.append((track, pin + step))
            for step in (-1, 0, 1):
                if pin + step in PIN_NUMBERS:
                    neighbours.append((track.other, pin + step))
            graph[(track, pin)] = tuple(neighbours)
    return graph


PIN_ADJACENCY: dict[PinKey, tuple[PinKey, ...]] = _build_adjacency()


class Direction(Enum):
    """Direction of an attack-board move relative to its controller."""

    FORWARD = "forward"
    BACKWARD = "backward"
    SIDE = "side"


def adjacent_pins(track: Track, pin: int) -> tuple[PinKey, ...]:
    return PIN_ADJACENCY[(track, pin)]


def is_adjacent(from_pin: PinKey, to_pin: PinKey) -> bool:
    return to_pin in PIN_ADJACENCY[from_pin]


def away_pin(color: Color) -> int:
    """Pin nearest the opponent for the given colour."""
    return 6 if color is Color.WHITE else 1


def classify_direction(from_pin: PinKey, to_pin: PinKey, color: Color) -> Direction:
    """Classify a pin-to-pin move from the point of view of ``color``.

    Moves that keep the pin level (including crossing to the other track
    at the same level) are sideways. Otherwise the move is forward when it
    brings the board closer to the controller's away pin.
    """
    if from_pin[1] == to_pin[1]:
        return Direction.SIDE
    target = away_pin(color)
    if abs(to_pin[1] - target) < abs(from_pin[1] - target):
        return Direction.FORWARD
    return Direction.BACKWARD
