# overload_gen/fixtures.py
"""
Test vectors for generated overloads.

Fixtures are stored as JSON, keyed by contract method name::

    {"add_euint8_uint8": [{"inputs": ["3", "4"], "output": "7"}]}

``reference_fixtures`` builds vectors for the default operator catalogue by
replaying each operator on plain integers.
"""
from __future__ import annotations
import json
import random
from pathlib import Path
from typing import Callable, Mapping, Sequence

from .errors import InvalidFixtureValue
from .operators import OverloadSignature
from .registry import OperandKind
from .testgen import TestVector

DEFAULT_FIXTURE_SEED = 1
DEFAULT_PER_OVERLOAD = 2

Fixtures = dict[str, list[TestVector]]


def load_fixtures(path: str | Path) -> Fixtures:
    """Read a fixture file."""
    with open(path) as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise InvalidFixtureValue(f"Fixture file {path} must contain a JSON object")
    return {
        method: [TestVector.from_dict(entry) for entry in entries]
        for method, entries in data.items()
    }


def dump_fixtures(fixtures: Mapping[str, Sequence[TestVector]], path: str | Path) -> None:
    """Write fixtures with values as decimal strings (256 bit safe)."""
    data = {
        method: [vector.to_dict() for vector in vectors]
        for method, vectors in sorted(fixtures.items())
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


# ---------------------------------------------------------------------------
# Plaintext reference model
# ---------------------------------------------------------------------------

def _rotl(a: int, n: int, bits: int) -> int:
    n %= bits
    mask = (1 << bits) - 1
    return ((a << n) | (a >> (bits - n))) & mask


def _rotr(a: int, n: int, bits: int) -> int:
    return _rotl(a, bits - (n % bits), bits)


# Each entry maps (a, b, bits) to the plaintext result before wrapping
_BINARY: dict[str, Callable[[int, int, int], int]] = {
    "add": lambda a, b, bits: a + b,
    "sub": lambda a, b, bits: a - b,
    "mul": lambda a, b, bits: a * b,
    "div": lambda a, b, bits: a // b,
    "rem": lambda a, b, bits: a % b,
    "and": lambda a, b, bits: a & b,
    "or": lambda a, b, bits: a | b,
    "xor": lambda a, b, bits: a ^ b,
    "shl": lambda a, b, bits: a << (b % bits),
    "shr": lambda a, b, bits: a >> (b % bits),
    "rotl": _rotl,
    "rotr": _rotr,
    "eq": lambda a, b, bits: int(a == b),
    "ne": lambda a, b, bits: int(a != b),
    "ge": lambda a, b, bits: int(a >= b),
    "gt": lambda a, b, bits: int(a > b),
    "le": lambda a, b, bits: int(a <= b),
    "lt": lambda a, b, bits: int(a < b),
    "min": lambda a, b, bits: min(a, b),
    "max": lambda a, b, bits: max(a, b),
}

_UNARY: dict[str, Callable[[int, int], int]] = {
    "neg": lambda a, bits: -a,
    "not": lambda a, bits: ~a,
}


_SHIFTS = ("shl", "shr", "rotl", "rotr")


def reference_result(sig: OverloadSignature, inputs: Sequence[int]) -> int:
    """Expected result of an overload on plain inputs.

    Arithmetic wraps modulo 2**bits of the result type; boolean results are 0/1.
    """
    bits = sig.arguments[0].bits
    if len(inputs) == 1:
        value = _UNARY[sig.name](inputs[0], bits)
    else:
        a, b = inputs
        # Shifts and rotates act on the width of the shifted operand
        width = bits if sig.name in _SHIFTS else sig.return_type.bits
        value = _BINARY[sig.name](a, b, width)

    if sig.return_type.kind == OperandKind.EBOOL:
        return value
    return value % (2 ** sig.return_type.bits)


def _operand_value(rng: random.Random, bits: int) -> int:
    # Small operands keep the expected values readable in generated tests
    return rng.randrange(0, 2 ** min(bits, 8))


def reference_vector(sig: OverloadSignature, rng: random.Random) -> TestVector:
    inputs = [_operand_value(rng, arg.bits) for arg in sig.arguments]

    if sig.name in ("div", "rem"):
        inputs[1] = inputs[1] or 1
    if sig.name in _SHIFTS:
        inputs[1] = inputs[1] % sig.arguments[0].bits

    return TestVector(tuple(inputs), reference_result(sig, inputs))


def reference_fixtures(
    signatures: Sequence[OverloadSignature],
    seed: int = DEFAULT_FIXTURE_SEED,
    per_overload: int = DEFAULT_PER_OVERLOAD,
) -> Fixtures:
    """Deterministic fixtures for every signature."""
    rng = random.Random(seed)
    fixtures: Fixtures = {}
    for sig in signatures:
        fixtures[sig.method_name] = [reference_vector(sig, rng) for _ in range(per_overload)]
    return fixtures
