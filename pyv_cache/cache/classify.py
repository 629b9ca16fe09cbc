from __future__ import annotations
from enum import Enum


class Outcome(Enum):
    HIT = "hit"
    COMPULSORY = "compulsory"
    CONFLICT = "conflict"
    CAPACITY = "capacity"

    @property
    def is_hit(self) -> bool:
        return self is Outcome.HIT

    @property
    def is_miss(self) -> bool:
        return self is not Outcome.HIT


MISS_KINDS = (Outcome.COMPULSORY, Outcome.CONFLICT, Outcome.CAPACITY)


def classify_miss(line_was_valid: bool, associativity: int, set_full: bool) -> Outcome:
    """Names the kind of a miss from the state of the line about to be filled.

    A never-valid line is a compulsory miss. A valid line with another tag is
    a conflict miss when the cache is direct-mapped and a capacity miss when
    every way of an associative set is taken.
    """
    if not line_was_valid:
        return Outcome.COMPULSORY
    if associativity == 1:
        return Outcome.CONFLICT
    if set_full:
        return Outcome.CAPACITY
    raise ValueError("A valid line in a set with free ways cannot be a miss victim.")
