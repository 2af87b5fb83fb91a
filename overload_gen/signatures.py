# overload_gen/signatures.py
"""
Overload enumeration.

Each rule is a pure function of its descriptors returning a new list of
signatures; ``generate`` concatenates them in a fixed order so the output is
deterministic for a given input ordering.
"""
from __future__ import annotations
from typing import Iterable, Sequence

from .errors import UnsupportedSignedPair
from .operators import (
    Arity,
    OperatorDescriptor,
    OverloadSignature,
    ReturnKind,
    TypeDescriptor,
)
from .registry import OperandKind, TypedOperand

DEFAULT_SHIFT_AMOUNT_BITS = 8


def _return_operand(op: OperatorDescriptor, bits: int) -> TypedOperand:
    if op.return_kind == ReturnKind.BOOLEAN:
        return TypedOperand(OperandKind.EBOOL, bits)
    return TypedOperand(OperandKind.EUINT, bits)


def _signature(op: OperatorDescriptor, arguments: Iterable[TypedOperand], ret: TypedOperand) -> OverloadSignature:
    return OverloadSignature(
        name=op.name,
        arguments=tuple(arguments),
        return_type=ret,
        binary_symbol=op.binary_symbol,
        unary_symbol=op.unary_symbol,
    )


def encrypted_pair_overloads(
    lhs: TypeDescriptor, rhs: TypeDescriptor, op: OperatorDescriptor
) -> list[OverloadSignature]:
    """Encrypted <op> encrypted. The result is widened to the larger operand."""
    if op.is_shift_or_rotate or not op.supports_encrypted or op.arity != Arity.BINARY:
        return []
    if not (lhs.supports(op) and rhs.supports(op)):
        return []

    if lhs.is_unsigned and rhs.is_unsigned:
        output_bits = max(lhs.bit_length, rhs.bit_length)
        return [
            _signature(
                op,
                [
                    TypedOperand(OperandKind.EUINT, lhs.bit_length),
                    TypedOperand(OperandKind.EUINT, rhs.bit_length),
                ],
                _return_operand(op, output_bits),
            )
        ]
    if lhs.is_signed and rhs.is_signed:
        raise UnsupportedSignedPair(
            f"Operator '{op.name}' on {lhs.display_name} x {rhs.display_name}: "
            "signed integer types are not supported yet"
        )
    return []


def scalar_overloads(type_: TypeDescriptor, op: OperatorDescriptor) -> list[OverloadSignature]:
    """Encrypted <op> scalar, and scalar <op> encrypted unless disallowed."""
    if op.is_shift_or_rotate or op.arity != Arity.BINARY or not op.supports_scalar:
        return []
    if not type_.supports(op) or not type_.is_unsigned:
        return []

    bits = type_.bit_length
    encrypted = TypedOperand(OperandKind.EUINT, bits)
    scalar = TypedOperand(OperandKind.UINT, bits)
    ret = _return_operand(op, bits)

    result = [_signature(op, [encrypted, scalar], ret)]
    if not op.disallow_scalar_on_left:
        result.append(_signature(op, [scalar, encrypted], ret))
    return result


def shift_overloads(
    type_: TypeDescriptor,
    op: OperatorDescriptor,
    shift_amount_bits: int = DEFAULT_SHIFT_AMOUNT_BITS,
) -> list[OverloadSignature]:
    """Shift or rotate by an encrypted amount and by a scalar amount.

    The amount always has ``shift_amount_bits`` bits whatever the operand width.
    """
    if not op.is_shift_or_rotate or not type_.supports(op) or not type_.is_unsigned:
        return []

    operand = TypedOperand(OperandKind.EUINT, type_.bit_length)
    return [
        _signature(op, [operand, TypedOperand(OperandKind.EUINT, shift_amount_bits)], operand),
        _signature(op, [operand, TypedOperand(OperandKind.UINT, shift_amount_bits)], operand),
    ]


def unary_overloads(type_: TypeDescriptor, op: OperatorDescriptor) -> list[OverloadSignature]:
    if op.is_shift_or_rotate or op.arity != Arity.UNARY:
        return []
    if not type_.supports(op) or not type_.is_unsigned:
        return []

    operand = TypedOperand(OperandKind.EUINT, type_.bit_length)
    return [_signature(op, [operand], operand)]


def generate(
    operators: Sequence[OperatorDescriptor],
    types: Sequence[TypeDescriptor],
    shift_amount_bits: int = DEFAULT_SHIFT_AMOUNT_BITS,
) -> list[OverloadSignature]:
    """Enumerate every overload the operators and types allow.

    Order: encrypted pairs, scalar forms, shifts/rotates, unary operators.
    """
    seen_names = set()
    for op in operators:
        if op.name in seen_names:
            raise ValueError(f"Duplicate operator name '{op.name}'")
        seen_names.add(op.name)

    # Types without any supported operator take no part in enumeration
    active = [t for t in types if t.supported_operators]

    encrypted = [
        sig
        for lhs in active
        for rhs in active
        for op in operators
        for sig in encrypted_pair_overloads(lhs, rhs, op)
    ]
    scalar = [sig for t in active for op in operators for sig in scalar_overloads(t, op)]
    shifts = [
        sig
        for t in active
        for op in operators
        for sig in shift_overloads(t, op, shift_amount_bits)
    ]
    unary = [sig for t in active for op in operators for sig in unary_overloads(t, op)]

    return encrypted + scalar + shifts + unary
