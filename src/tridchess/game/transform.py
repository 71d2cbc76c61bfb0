"""Passenger coordinate transforms between attack-board instances."""

from dataclasses import dataclass
from enum import Enum

from tridchess.game.geometry import World
from tridchess.game.ids import AttackInstance


class ArrivalChoice(Enum):
    """How a passenger is placed on the destination instance."""

    IDENTITY = "identity"  # keep local coordinates
    ROT180 = "rot180"  # rotate local coordinates half a turn


@dataclass(frozen=True)
class ArrivalOption:
    """One candidate placement of a passenger after a board move."""

    choice: ArrivalChoice
    file: int
    rank: int


def rotate180(local_file: int, local_rank: int) -> tuple[int, int]:
    """Rotate a 2x2 local coordinate half a turn. Applying it twice is a no-op."""
    return (1 - local_file, 1 - local_rank)


def arrival_coordinates(
    world: World,
    from_instance: AttackInstance,
    to_instance: AttackInstance,
    file: int,
    rank: int,
    choice: ArrivalChoice = ArrivalChoice.IDENTITY,
) -> tuple[int, int]:
    """Map a passenger's global file/rank onto the destination instance.

    The passenger's local coordinates on the source instance are carried
    over (optionally rotated) and read back through the destination
    instance's own local ordering, so cross-track moves land on the
    destination track's files.

    Args:
        world: The static world
        from_instance: Instance the passenger currently sits on
        to_instance: Instance the board is moving to
        file: Passenger's current file
        rank: Passenger's current rank
        choice: Identity or 180-degree arrival

    Returns:
        (file, rank) of the passenger on the destination instance
    """
    local_file, local_rank = world.board(from_instance).to_local(file, rank)
    if choice is ArrivalChoice.ROT180:
        local_file, local_rank = rotate180(local_file, local_rank)
    return world.board(to_instance).to_global(local_file, local_rank)


def arrival_options(
    world: World,
    from_instance: AttackInstance,
    to_instance: AttackInstance,
    file: int,
    rank: int,
) -> list[ArrivalOption]:
    """Both candidate placements for a passenger, identity first."""
    options = []
    for choice in ArrivalChoice:
        dest_file, dest_rank = arrival_coordinates(
            world, from_instance, to_instance, file, rank, choice
        )
        options.append(ArrivalOption(choice=choice, file=dest_file, rank=dest_rank))
    return options


def is_arrival_ambiguous(from_instance: AttackInstance, to_instance: AttackInstance) -> bool:
    """A change of rotation leaves the passenger's placement up to the mover."""
    return from_instance.rotation is not to_instance.rotation
