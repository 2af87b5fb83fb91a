# overload_gen/testgen.py
"""
TypeScript test generation.

Overloads from all shards are streamed into ``num_groups`` test files. Every
overload gets one ``it(...)`` case per registered test vector; an overload
without vectors aborts generation.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

from .config import EmitOptions, ImportConfig
from .contracts import contract_name
from .errors import InvalidFixtureValue, MissingTestFixtures, ValueOutOfRange
from .operators import OverloadSignature
from .registry import TypedOperand, is_encrypted, lookup, storage_var_name
from .shards import OverloadShard, shuffle_in_place


@dataclass(frozen=True)
class TestVector:
    """Inputs and expected output for one call of an overload."""
    __test__ = False  # not a pytest class

    inputs: tuple
    output: object

    @classmethod
    def from_dict(cls, data: Mapping) -> TestVector:
        return cls(inputs=tuple(data["inputs"]), output=data["output"])

    def to_dict(self) -> dict:
        return {"inputs": [str(v) for v in self.inputs], "output": str(self.output)}


def to_exact_int(value) -> int:
    """Coerce a fixture value (int, bool, decimal or 0x string) to an int.

    Strings are base 10 unless they carry a ``0x`` prefix, so zero padded
    decimals such as ``"010"`` read as 10.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidFixtureValue(f"Fixture value {value} is not an integer")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        digits = text.lstrip("+-")
        base = 16 if digits[:2].lower() == "0x" else 10
        try:
            return int(text, base)
        except ValueError:
            raise InvalidFixtureValue(f"Fixture value {value!r} is not an integer") from None
    raise InvalidFixtureValue(f"Unsupported fixture value {value!r}")


def ensure_in_bit_range(bits: int, value: int, context: str = "") -> None:
    limit = 2 ** bits
    if not 0 <= value <= limit:
        where = f" ({context})" if context else ""
        raise ValueOutOfRange(f"{bits} bit number {value} out of range [0, {limit}]{where}")


def fixtures_for(sig: OverloadSignature, fixtures: Mapping[str, Sequence]) -> list[TestVector]:
    """Look up and normalize the test vectors of one overload."""
    method = sig.method_name
    vectors = fixtures.get(method) or []
    if not vectors:
        raise MissingTestFixtures(f"Overload {method} has no test, please add them.")

    result = []
    for vector in vectors:
        if isinstance(vector, Mapping):
            vector = TestVector.from_dict(vector)
        if len(vector.inputs) != len(sig.arguments):
            raise InvalidFixtureValue(
                f"Overload {method} expects {len(sig.arguments)} inputs, "
                f"fixture has {len(vector.inputs)}"
            )
        inputs = []
        for i, (raw, arg) in enumerate(zip(vector.inputs, sig.arguments)):
            value = to_exact_int(raw)
            ensure_in_bit_range(arg.bits, value, f"{method} input {i}")
            inputs.append(value)
        output = to_exact_int(vector.output)
        ensure_in_bit_range(sig.return_type.bits, output, f"{method} output")
        result.append(TestVector(tuple(inputs), output))
    return result


# ---------------------------------------------------------------------------
# Test cases
# ---------------------------------------------------------------------------

def _call_arguments(sig: OverloadSignature, inputs: Sequence[int]) -> tuple[str, str]:
    """Return (input builder lines, contract call arguments)."""
    adders = []
    args = []
    handle = 0
    for value, arg in zip(inputs, sig.arguments):
        entry = lookup(arg.kind)
        if is_encrypted(arg):
            adders.append(f"input.{entry.input_adder(arg.bits)}({entry.literal(value)});")
            args.append(f"encryptedAmount.handles[{handle}]")
            handle += 1
        else:
            args.append(entry.literal(value))
    args.append("encryptedAmount.inputProof")
    return "\n    ".join(adders), ", ".join(args)


def _expected_literal(ret: TypedOperand, value: int) -> str:
    return lookup(ret.kind).literal(value)


def _public_decrypt_case(shard_number: int, sig: OverloadSignature, name: str, vector: TestVector) -> str:
    adders, call_args = _call_arguments(sig, vector.inputs)
    contract = f"this.contract{shard_number}"
    return f"""
  it('{name}', async function () {{
    const input = this.instance.createEncryptedInput({contract}Address, this.signer.address);
    {adders}
    const encryptedAmount = await input.encrypt();
    const tx = await {contract}.{sig.method_name}({call_args});
    await tx.wait();
    const handle = await {contract}.{storage_var_name(sig.return_type)}();
    const res = await this.instance.publicDecrypt([handle]);
    assert.deepEqual(res.clearValues[handle], {_expected_literal(sig.return_type, vector.output)});
  }});
"""


def decrypt_helper(ret: TypedOperand) -> str:
    return lookup(ret.kind).decrypt_helper(ret.bits)


def _user_decrypt_case(shard_number: int, sig: OverloadSignature, name: str, vector: TestVector) -> str:
    adders, call_args = _call_arguments(sig, vector.inputs)
    contract = f"this.contract{shard_number}"
    decrypt = decrypt_helper(sig.return_type)
    return f"""
  it('{name}', async function () {{
    const input = this.instances.alice.createEncryptedInput({contract}Address, this.signers.alice.address);
    {adders}
    const encryptedAmount = await input.encrypt();
    const tx = await {contract}.{sig.method_name}({call_args});
    await tx.wait();
    const res = await {decrypt}(await {contract}.{storage_var_name(sig.return_type)}());
    expect(res).to.equal({_expected_literal(sig.return_type, vector.output)});
  }});
"""


def overload_test_cases(
    shard: OverloadShard,
    sig: OverloadSignature,
    fixtures: Mapping[str, Sequence],
    options: EmitOptions,
) -> list[str]:
    """Render one test case per fixture of an overload."""
    render: Callable = _public_decrypt_case if options.public_decrypt else _user_decrypt_case
    cases = []
    for index, vector in enumerate(fixtures_for(sig, fixtures), start=1):
        name = f'test operator "{sig.name}" overload {sig.encrypted_signature} test {index}'
        cases.append(render(shard.shard_number, sig, name, vector))
    return cases


# ---------------------------------------------------------------------------
# Group preambles
# ---------------------------------------------------------------------------

def _deploy_fixtures(shard_numbers: Sequence[int], imports: ImportConfig) -> tuple[str, str]:
    type_imports = "\n".join(
        f"import type {{ {contract_name(n)} }} from '{imports.typechain}/{contract_name(n)}';"
        for n in shard_numbers
    )
    deployers = "\n".join(
        f"""
async function deployFHEVMTestFixture{n}(): Promise<{contract_name(n)}> {{
  const signers = await getSigners();
  const admin = signers.alice;

  const contractFactory = await ethers.getContractFactory('{contract_name(n)}');
  const contract = await contractFactory.connect(admin).deploy();
  await contract.waitForDeployment();

  return contract;
}}"""
        for n in shard_numbers
    )
    return type_imports, deployers


def _deploy_statements(shard_numbers: Sequence[int]) -> str:
    return "\n".join(
        f"""    const contract{n} = await deployFHEVMTestFixture{n}();
    this.contract{n}Address = await contract{n}.getAddress();
    this.contract{n} = contract{n};
"""
        for n in shard_numbers
    )


def group_preamble(
    group_index: int,
    shard_numbers: Sequence[int],
    imports: ImportConfig,
    options: EmitOptions,
    decrypt_helpers: Sequence[str] = (),
) -> str:
    """Imports, deploy helpers and the opening of the describe block.

    ``decrypt_helpers`` lists the user decrypt functions the group calls.
    """
    type_imports, deployers = _deploy_fixtures(shard_numbers, imports)
    deploys = _deploy_statements(shard_numbers)

    if options.public_decrypt:
        return f"""import {{ assert }} from 'chai';
import {{ ethers }} from 'hardhat';

{type_imports}
import {{ createInstance }} from '{imports.instance}';
import {{ getSigners, initSigners }} from '{imports.signers}';
{deployers}

describe('FHEVM operations {group_index}', function () {{
  before(async function () {{
    await initSigners(1);
    this.signers = await getSigners();
    this.signer = this.signers.alice;

{deploys}
    this.instance = await createInstance();
  }});
"""

    helpers = "".join(f", {name}" for name in decrypt_helpers)
    return f"""import {{ expect }} from 'chai';
import {{ ethers }} from 'hardhat';

{type_imports}
import {{ createInstances{helpers} }} from '{imports.instance}';
import {{ getSigners, initSigners }} from '{imports.signers}';
{deployers}

describe('FHEVM operations {group_index}', function () {{
  before(async function () {{
    await initSigners(1);
    this.signers = await getSigners();

{deploys}
    const instances = await createInstances(this.signers);
    this.instances = instances;
  }});
"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def emit_test_files(
    shards: Sequence[OverloadShard],
    num_groups: int,
    fixtures: Mapping[str, Sequence],
    imports: ImportConfig,
    options: EmitOptions = EmitOptions(),
    bits: Callable[[], int] | None = None,
) -> list[str]:
    """Render the test files, one string per output group.

    Group boundaries follow the running overload count, not shard boundaries.
    With shuffling enabled each shard's overload list is reordered in place.
    """
    if num_groups < 1:
        raise ValueError(f"Number of test groups must be positive, got {num_groups}")

    total = sum(len(shard.overloads) for shard in shards)
    if total == 0:
        return []
    group_size = -(-total // num_groups)

    for shard in shards:
        shuffle_in_place(shard.overloads, options.shuffle_mode, bits)

    groups: list[tuple[list[int], list[str], list[str]]] = []
    counter = 0
    for shard in shards:
        for sig in shard.overloads:
            if counter % group_size == 0:
                groups.append(([], [], []))
            shard_numbers, helpers, cases = groups[-1]
            if shard.shard_number not in shard_numbers:
                shard_numbers.append(shard.shard_number)
            helper = decrypt_helper(sig.return_type)
            if helper not in helpers:
                helpers.append(helper)
            cases.extend(overload_test_cases(shard, sig, fixtures, options))
            counter += 1

    return [
        group_preamble(index, shard_numbers, imports, options, helpers) + "".join(cases) + "});\n"
        for index, (shard_numbers, helpers, cases) in enumerate(groups, start=1)
    ]
