# overload_gen/operators.py
"""Operator and type descriptors, and the overload signatures built from them."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .registry import TypedOperand, encrypted_type, plain_type


class Arity(Enum):
    UNARY = 1
    BINARY = 2


class ReturnKind(Enum):
    SAME_AS_OPERAND = "same"
    BOOLEAN = "bool"


@dataclass(frozen=True)
class OperatorDescriptor:
    """An operator of the FHE library and the overload families it allows.

    Shift and rotate operators follow their own enumeration rule, so the
    scalar and arity flags are ignored for them.
    """
    name: str
    arity: Arity = Arity.BINARY
    supports_encrypted: bool = True
    supports_scalar: bool = False
    disallow_scalar_on_left: bool = False
    is_shift: bool = False
    is_rotate: bool = False
    return_kind: ReturnKind = ReturnKind.SAME_AS_OPERAND
    binary_symbol: str | None = None
    unary_symbol: str | None = None

    def __post_init__(self):
        if self.is_shift and self.is_rotate:
            raise ValueError(f"Operator '{self.name}' cannot be both shift and rotate")

    @property
    def is_shift_or_rotate(self) -> bool:
        return self.is_shift or self.is_rotate


@dataclass(frozen=True)
class TypeDescriptor:
    """A plaintext integer type and the operators the library supports on it."""
    display_name: str  # "Uint8", "Int16", ...
    bit_length: int
    supported_operators: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Accept any iterable of names
        object.__setattr__(self, "supported_operators", frozenset(self.supported_operators))

    @property
    def is_unsigned(self) -> bool:
        return self.display_name.startswith("Uint")

    @property
    def is_signed(self) -> bool:
        return self.display_name.startswith("Int")

    def supports(self, op: OperatorDescriptor) -> bool:
        return op.name in self.supported_operators


@dataclass(frozen=True)
class OverloadSignature:
    """One generated overload: operator name, argument types, return type."""
    name: str
    arguments: tuple[TypedOperand, ...]
    return_type: TypedOperand
    binary_symbol: str | None = None
    unary_symbol: str | None = None

    @property
    def key(self) -> tuple[str, tuple[TypedOperand, ...]]:
        return (self.name, self.arguments)

    @property
    def method_name(self) -> str:
        """Contract method name, e.g. add_euint8_uint8."""
        return "_".join([self.name, *(plain_type(a) for a in self.arguments)])

    @property
    def encrypted_signature(self) -> str:
        """Human readable form used in test names, e.g. (euint8, uint8) => euint8."""
        args = ", ".join(plain_type(a) for a in self.arguments)
        return f"({args}) => {encrypted_type(self.return_type)}"

    def __repr__(self) -> str:
        return f"{self.name}{self.encrypted_signature}"


# ---------------------------------------------------------------------------
# Library catalogue
# ---------------------------------------------------------------------------

ALL_OPERATORS: list[OperatorDescriptor] = [
    OperatorDescriptor("add", supports_scalar=True, binary_symbol="+"),
    OperatorDescriptor("sub", supports_scalar=True, binary_symbol="-"),
    OperatorDescriptor("mul", supports_scalar=True, binary_symbol="*"),
    OperatorDescriptor(
        "div", supports_encrypted=False, supports_scalar=True, disallow_scalar_on_left=True,
    ),
    OperatorDescriptor(
        "rem", supports_encrypted=False, supports_scalar=True, disallow_scalar_on_left=True,
    ),
    OperatorDescriptor("and", supports_scalar=True, binary_symbol="&"),
    OperatorDescriptor("or", supports_scalar=True, binary_symbol="|"),
    OperatorDescriptor("xor", supports_scalar=True, binary_symbol="^"),
    OperatorDescriptor("shl", is_shift=True),
    OperatorDescriptor("shr", is_shift=True),
    OperatorDescriptor("rotl", is_rotate=True),
    OperatorDescriptor("rotr", is_rotate=True),
    OperatorDescriptor("eq", supports_scalar=True, return_kind=ReturnKind.BOOLEAN),
    OperatorDescriptor("ne", supports_scalar=True, return_kind=ReturnKind.BOOLEAN),
    OperatorDescriptor("ge", supports_scalar=True, return_kind=ReturnKind.BOOLEAN),
    OperatorDescriptor("gt", supports_scalar=True, return_kind=ReturnKind.BOOLEAN),
    OperatorDescriptor("le", supports_scalar=True, return_kind=ReturnKind.BOOLEAN),
    OperatorDescriptor("lt", supports_scalar=True, return_kind=ReturnKind.BOOLEAN),
    OperatorDescriptor("min", supports_scalar=True),
    OperatorDescriptor("max", supports_scalar=True),
    OperatorDescriptor("neg", arity=Arity.UNARY, unary_symbol="-"),
    OperatorDescriptor("not", arity=Arity.UNARY, unary_symbol="~"),
]

_ARITHMETIC = {"add", "sub", "mul", "div", "rem", "min", "max", "neg"}
_COMPARISON = {"ge", "gt", "le", "lt"}
_BITWISE = {"and", "or", "xor", "not", "shl", "shr", "rotl", "rotr"}
_EQUALITY = {"eq", "ne"}

ALL_TYPES: list[TypeDescriptor] = [
    TypeDescriptor("Uint8", 8, _ARITHMETIC | _COMPARISON | _BITWISE | _EQUALITY),
    TypeDescriptor("Uint16", 16, _ARITHMETIC | _COMPARISON | _BITWISE | _EQUALITY),
    TypeDescriptor("Uint32", 32, _ARITHMETIC | _COMPARISON | _BITWISE | _EQUALITY),
    TypeDescriptor("Uint64", 64, _ARITHMETIC | _COMPARISON | _BITWISE | _EQUALITY),
    TypeDescriptor("Uint128", 128, _ARITHMETIC | _COMPARISON | _BITWISE | _EQUALITY),
    TypeDescriptor("Uint256", 256, _BITWISE | _EQUALITY | {"neg"}),
    # Signed types are not wired into the library yet
    TypeDescriptor("Int8", 8),
    TypeDescriptor("Int16", 16),
    TypeDescriptor("Int32", 32),
    TypeDescriptor("Int64", 64),
]
