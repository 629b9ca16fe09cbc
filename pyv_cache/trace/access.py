from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

MAX_ADDRESS = (1 << 32) - 1


class AccessKind(Enum):
    DATA_READ = "R"
    DATA_WRITE = "W"
    INSTRUCTION_FETCH = "I"


@dataclass(frozen=True)
class AccessRequest:
    address: int
    kind: AccessKind

    def __post_init__(self):
        if not 0 <= self.address <= MAX_ADDRESS:
            raise ValueError(f"Address {self.address:#x} does not fit in 32 bits.")
