# overload_gen/contracts.py
"""Solidity test contract generation, one contract per shard."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from .operators import OverloadSignature
from .registry import (
    encrypted_type,
    external_type,
    is_encrypted,
    lookup,
    plain_type,
    storage_var_name,
)
from .shards import OverloadShard

CONTRACT_PREFIX = "FHEVMTestSuite"


@dataclass(frozen=True)
class ResultSlot:
    """A state variable shared by every overload returning the same type."""
    name: str
    encrypted_type: str

    def declaration(self) -> str:
        return f"{self.encrypted_type} public {self.name};"


def contract_name(shard_number: int) -> str:
    return f"{CONTRACT_PREFIX}{shard_number}"


def result_slots(shard: OverloadShard) -> list[ResultSlot]:
    """Distinct result slots of a shard, in order of first use."""
    slots: dict[str, ResultSlot] = {}
    for sig in shard.overloads:
        name = storage_var_name(sig.return_type)
        if name not in slots:
            slots[name] = ResultSlot(name, encrypted_type(sig.return_type))
    return list(slots.values())


def _arg_name(index: int) -> str:
    return chr(ord("a") + index)


def contract_arguments(sig: OverloadSignature) -> str:
    """Calldata parameter list, always ending with the input proof."""
    args = [f"{external_type(a)} {_arg_name(i)}" for i, a in enumerate(sig.arguments)]
    args.append("bytes calldata inputProof")
    return ", ".join(args)


def _uses_operator_syntax(sig: OverloadSignature) -> bool:
    """Library operators bind only operands of one and the same encrypted type."""
    first = sig.arguments[0]
    return is_encrypted(first) and all(arg == first for arg in sig.arguments)


def _operation(sig: OverloadSignature, result_type: str) -> str:
    procs = [f"{_arg_name(i)}Proc" for i in range(len(sig.arguments))]
    if _uses_operator_syntax(sig):
        if sig.binary_symbol and len(procs) == 2:
            return f"{result_type} result = {procs[0]} {sig.binary_symbol} {procs[1]};"
        if sig.unary_symbol and len(procs) == 1:
            return f"{result_type} result = {sig.unary_symbol}{procs[0]};"
    return f"{result_type} result = FHE.{sig.name}({', '.join(procs)});"


def _function(sig: OverloadSignature, use_public_decrypt: bool) -> str:
    lines = []
    for i, arg in enumerate(sig.arguments):
        name = _arg_name(i)
        lines.append(f"{plain_type(arg)} {name}Proc = {lookup(arg.kind).cast(name)};")

    lines.append(_operation(sig, encrypted_type(sig.return_type)))

    if use_public_decrypt:
        lines.append("FHE.makePubliclyDecryptable(result);")
    else:
        lines.append("FHE.allowThis(result);")
        lines.append("FHE.allow(result, msg.sender);")
    lines.append(f"{storage_var_name(sig.return_type)} = result;")

    body = "\n        ".join(lines)
    return f"""    function {sig.method_name}({contract_arguments(sig)}) public {{
        {body}
    }}"""


def _imports(import_statements: Sequence[str]) -> str:
    lines = []
    for stmt in import_statements:
        stmt = stmt.strip()
        lines.append(stmt if stmt.endswith(";") else f"{stmt};")
    return "\n".join(lines)


def emit_contract(
    shard: OverloadShard,
    import_statements: Sequence[str],
    parent_contract: str | None = None,
    use_public_decrypt: bool = False,
) -> str:
    """Generate the Solidity source of the test contract for one shard."""
    header = "// SPDX-License-Identifier: BSD-3-Clause-Clear\npragma solidity ^0.8.24;"

    inheritance = f" is {parent_contract}" if parent_contract else ""
    members = ["\n".join(f"    {slot.declaration()}" for slot in result_slots(shard))]
    if not parent_contract:
        # Setup is inherited when a parent contract is given
        members.append("""    constructor() {
        FHE.setCoprocessor(CoprocessorSetup.defaultConfig());
    }""")
    members.extend(_function(sig, use_public_decrypt) for sig in shard.overloads)
    members = [m for m in members if m.strip()]

    parts = [header, _imports(import_statements)]
    parts.append(
        f"contract {contract_name(shard.shard_number)}{inheritance} {{\n"
        + "\n\n".join(members)
        + "\n}"
    )
    parts = [p for p in parts if p.strip()]

    return "\n\n".join(parts) + "\n"
