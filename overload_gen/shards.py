# overload_gen/shards.py
"""Split overload signatures into fixed-capacity shards."""
from __future__ import annotations
import random
from dataclasses import dataclass, field
from enum import Enum
from functools import cmp_to_key
from typing import Callable, Sequence

from .operators import OverloadSignature

DEFAULT_SHARD_CAPACITY = 90
DEFAULT_SEED = 0x5EED


class ShuffleMode(Enum):
    NONE = "none"
    PSEUDO_RANDOM = "pseudo"
    NON_DETERMINISTIC = "random"


class PseudoRandomBits:
    """Deterministic stream of random bits.

    One instance is shared by every reordering step of a run so that a given
    seed always produces the same shard and test layout.
    """

    def __init__(self, seed: int = DEFAULT_SEED):
        self.seed = seed
        self._rng = random.Random(seed)

    def __call__(self) -> int:
        return self._rng.getrandbits(1)


@dataclass
class OverloadShard:
    """A group of overloads compiled into one test contract."""
    shard_number: int
    overloads: list[OverloadSignature] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.overloads)


def _comparator(mode: ShuffleMode, bits: Callable[[], int] | None) -> Callable[[object, object], float]:
    if mode == ShuffleMode.PSEUDO_RANDOM:
        source = bits or PseudoRandomBits()
        return lambda _a, _b: -1 if source() == 0 else 1
    return lambda _a, _b: random.random() - 0.5


def shuffle_in_place(
    items: list,
    mode: ShuffleMode,
    bits: Callable[[], int] | None = None,
) -> None:
    """Reorder ``items`` with a randomized comparator sort.

    This is not a uniform permutation; the resulting order only depends on
    the bit stream and the sort implementation.
    """
    if mode == ShuffleMode.NONE:
        return
    items.sort(key=cmp_to_key(_comparator(mode, bits)))


def partition(
    signatures: Sequence[OverloadSignature],
    capacity: int = DEFAULT_SHARD_CAPACITY,
    shuffle: ShuffleMode = ShuffleMode.NONE,
    bits: Callable[[], int] | None = None,
) -> list[OverloadShard]:
    """Slice signatures into shards of at most ``capacity`` overloads.

    Shards are numbered from 1 in slice order; only the last one may be short.
    The caller's sequence is never reordered.
    """
    if capacity < 1:
        raise ValueError(f"Shard capacity must be positive, got {capacity}")

    ordered = list(signatures)
    shuffle_in_place(ordered, shuffle, bits)

    return [
        OverloadShard(shard_number=i // capacity + 1, overloads=ordered[i:i + capacity])
        for i in range(0, len(ordered), capacity)
    ]
