# overload_gen/registry.py
"""Operand kinds and how each one is rendered in Solidity and TypeScript."""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .errors import UnknownOperandKind

# Widths accepted by the FHE library. 1 is the nominal width of ebool.
SUPPORTED_BITS = (1, 2, 4, 8, 16, 32, 64, 128, 160, 256)


class OperandKind(Enum):
    EUINT = "euint"
    UINT = "uint"
    EBOOL = "ebool"


@dataclass(frozen=True)
class TypedOperand:
    """An operand kind paired with a bit width."""
    kind: OperandKind
    bits: int

    def __post_init__(self):
        if self.bits not in SUPPORTED_BITS:
            raise ValueError(
                f"Unsupported bit width {self.bits}, expected one of {SUPPORTED_BITS}"
            )

    def __repr__(self) -> str:
        kind = getattr(self.kind, "value", self.kind)
        return f"{kind}{self.bits}"


@dataclass(frozen=True)
class TypeRendering:
    """Pure rendering functions for one operand kind."""
    plain: Callable[[int], str]  # name used in method names, e.g. uint8
    encrypted: Callable[[int], str]  # internal type, e.g. euint8
    external: Callable[[int], str]  # calldata type, e.g. externalEuint8
    storage_prefix: str
    width_suffix: bool
    # Contract-side conversion from calldata to the internal representation
    cast: Callable[[str], str]
    # Encrypted input builder method in tests, None for plaintext operands
    input_adder: Callable[[int], str] | None
    decrypt_helper: Callable[[int], str]
    literal: Callable[[int], str]


TYPE_REGISTRY: dict[OperandKind, TypeRendering] = {
    OperandKind.EUINT: TypeRendering(
        plain=lambda bits: f"euint{bits}",
        encrypted=lambda bits: f"euint{bits}",
        external=lambda bits: f"externalEuint{bits}",
        storage_prefix="resEuint",
        width_suffix=True,
        cast=lambda expr: f"FHE.fromExternal({expr}, inputProof)",
        input_adder=lambda bits: f"add{bits}",
        decrypt_helper=lambda bits: f"decrypt{bits}",
        literal=lambda value: f"{value}n",
    ),
    OperandKind.UINT: TypeRendering(
        plain=lambda bits: f"uint{bits}",
        encrypted=lambda bits: f"euint{bits}",
        external=lambda bits: f"uint{bits}",
        storage_prefix="resUint",
        width_suffix=True,
        cast=lambda expr: expr,
        input_adder=None,
        decrypt_helper=lambda bits: f"decrypt{bits}",
        literal=lambda value: f"{value}n",
    ),
    OperandKind.EBOOL: TypeRendering(
        plain=lambda bits: "ebool",
        encrypted=lambda bits: "ebool",
        external=lambda bits: "externalEbool",
        storage_prefix="resEbool",
        width_suffix=False,
        cast=lambda expr: f"FHE.asEbool({expr})",
        input_adder=lambda bits: "addBool",
        decrypt_helper=lambda bits: "decryptBool",
        literal=lambda value: "true" if value else "false",
    ),
}


def lookup(kind: OperandKind) -> TypeRendering:
    """Return the rendering entry for an operand kind."""
    try:
        return TYPE_REGISTRY[kind]
    except (KeyError, TypeError):
        raise UnknownOperandKind(f"Unknown operand kind {kind!r}") from None


def plain_type(operand: TypedOperand) -> str:
    return lookup(operand.kind).plain(operand.bits)


def encrypted_type(operand: TypedOperand) -> str:
    return lookup(operand.kind).encrypted(operand.bits)


def external_type(operand: TypedOperand) -> str:
    return lookup(operand.kind).external(operand.bits)


def storage_var_name(operand: TypedOperand) -> str:
    """Name of the contract state variable holding results of this type.

    ebool has no parametrized width, so its slot name has no suffix.
    """
    entry = lookup(operand.kind)
    if not entry.width_suffix:
        return entry.storage_prefix
    return f"{entry.storage_prefix}{operand.bits}"


def render(kind: OperandKind, bits: int) -> tuple[str, str, str, str]:
    """Return the (plain, encrypted, external, storage) renderings."""
    operand = TypedOperand(kind, bits)
    return (
        plain_type(operand),
        encrypted_type(operand),
        external_type(operand),
        storage_var_name(operand),
    )


def is_encrypted(operand: TypedOperand) -> bool:
    """True when the operand travels as an encrypted input handle."""
    return lookup(operand.kind).input_adder is not None
