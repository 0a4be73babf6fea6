from __future__ import annotations

import random
from typing import List, Optional, Protocol

from .errors import ConfigError
from .pieces import CATALOG, PieceDefinition, TetrominoType


class PieceGenerator(Protocol):
    def next_piece(self) -> PieceDefinition: ...

    def reseed(self, seed: Optional[int]) -> None: ...


class UniformGenerator:
    """Each piece is drawn independently and uniformly from the catalog."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)

    def reseed(self, seed: Optional[int]) -> None:
        self.rng.seed(seed)

    def next_piece(self) -> PieceDefinition:
        return CATALOG[self.rng.choice(list(TetrominoType))]


class BagGenerator:
    """Deals all seven pieces in shuffled order before refilling the bag."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)
        self.bag: List[TetrominoType] = []

    def reseed(self, seed: Optional[int]) -> None:
        self.rng.seed(seed)
        self.bag = []

    def next_piece(self) -> PieceDefinition:
        if not self.bag:
            self.bag = list(TetrominoType)
            self.rng.shuffle(self.bag)
        return CATALOG[self.bag.pop()]


GENERATORS = {
    "uniform": UniformGenerator,
    "bag": BagGenerator,
}


def make_generator(name: str, seed: Optional[int] = None) -> PieceGenerator:
    try:
        factory = GENERATORS[name]
    except KeyError:
        raise ConfigError(f"unknown randomizer {name!r}; expected one of {sorted(GENERATORS)}") from None
    return factory(seed)
