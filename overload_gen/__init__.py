# overload_gen/__init__.py
"""
Operator overload test generation for the FHE Solidity library.

Enumerates every overload of the library's operators, splits them into
contract-sized shards and renders the Solidity test contracts and the
TypeScript tests that check their decrypted results.
"""
from .registry import OperandKind, TypedOperand
from .operators import (
    Arity,
    OperatorDescriptor,
    OverloadSignature,
    ReturnKind,
    TypeDescriptor,
)
from .signatures import generate
from .shards import OverloadShard, ShuffleMode, partition
from .contracts import emit_contract
from .testgen import TestVector, emit_test_files

__all__ = [
    "OperandKind",
    "TypedOperand",
    "Arity",
    "OperatorDescriptor",
    "OverloadSignature",
    "ReturnKind",
    "TypeDescriptor",
    "generate",
    "OverloadShard",
    "ShuffleMode",
    "partition",
    "emit_contract",
    "TestVector",
    "emit_test_files",
]
