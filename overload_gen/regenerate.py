# overload_gen/regenerate.py
"""
CLI for regenerating the FHE operator overload test suite.

Usage:
    python -m overload_gen.regenerate --contracts-dir contracts/tests --tests-dir test/fhevmOperations
    python -m overload_gen.regenerate --num-test-groups 12 --shuffle --pseudo-rand
    python -m overload_gen.regenerate --fixtures overloads.json --public-decrypt
"""
from __future__ import annotations
import argparse
import os
import sys
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from .config import EmitOptions, GeneratorConfig, ImportConfig
from .contracts import contract_name, emit_contract
from .errors import GenerationError
from .fixtures import dump_fixtures, load_fixtures, reference_fixtures
from .operators import ALL_OPERATORS, ALL_TYPES, OperatorDescriptor, OverloadSignature, TypeDescriptor
from .shards import OverloadShard, PseudoRandomBits, partition
from .signatures import generate
from .testgen import emit_test_files


@dataclass
class GenerationResult:
    signatures: list[OverloadSignature]
    shards: list[OverloadShard]
    contracts: list[str]
    tests: list[str]

    def stats(self) -> dict:
        """Return generation statistics."""
        return {
            "num_overloads": len(self.signatures),
            "num_shards": len(self.shards),
            "num_test_files": len(self.tests),
            "num_test_cases": sum(t.count("\n  it('") for t in self.tests),
            "max_shard_size": max((len(s) for s in self.shards), default=0),
            "overloads_per_operator": dict(Counter(s.name for s in self.signatures)),
        }


def generate_all(
    config: GeneratorConfig,
    fixtures: Mapping[str, Sequence] | None = None,
    operators: Sequence[OperatorDescriptor] = ALL_OPERATORS,
    types: Sequence[TypeDescriptor] = ALL_TYPES,
) -> GenerationResult:
    """Run the whole pipeline in memory.

    Nothing is returned unless every stage succeeded, so callers can write the
    result out without risking a partial suite.
    """
    signatures = generate(operators, types, config.shift_amount_bits)
    if fixtures is None:
        fixtures = reference_fixtures(signatures, seed=config.seed)

    # One bit stream drives both reorderings of a run
    bits = PseudoRandomBits(config.seed)
    shards = partition(signatures, config.shard_capacity, config.options.shuffle_mode, bits)
    contracts = [
        emit_contract(
            shard,
            config.contract_imports,
            config.parent_contract,
            config.options.public_decrypt,
        )
        for shard in shards
    ]
    tests = emit_test_files(
        shards, config.num_test_groups, fixtures, config.imports, config.options, bits
    )
    return GenerationResult(signatures, shards, contracts, tests)


def write_result(result: GenerationResult, contracts_dir: Path, tests_dir: Path) -> list[Path]:
    contracts_dir.mkdir(parents=True, exist_ok=True)
    tests_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for shard, code in zip(result.shards, result.contracts):
        path = contracts_dir / f"{contract_name(shard.shard_number)}.sol"
        path.write_text(code)
        written.append(path)
    for index, code in enumerate(result.tests, start=1):
        path = tests_dir / f"fhevmOperations{index}.ts"
        path.write_text(code)
        written.append(path)
    return written


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Regenerate FHE operator overload test contracts and tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Import paths not given on the command line are read from
OVERLOAD_GEN_SIGNERS_IMPORT, OVERLOAD_GEN_INSTANCE_IMPORT and
OVERLOAD_GEN_TYPECHAIN_IMPORT.

Examples:
    python -m overload_gen.regenerate --num-test-groups 12
    python -m overload_gen.regenerate --shuffle --pseudo-rand --seed 42
        """,
    )
    parser.add_argument(
        "--contracts-dir",
        type=str,
        default="contracts/tests",
        help="Output directory for Solidity contracts (default: contracts/tests)",
    )
    parser.add_argument(
        "--tests-dir",
        type=str,
        default="test/fhevmOperations",
        help="Output directory for TypeScript tests (default: test/fhevmOperations)",
    )
    parser.add_argument(
        "--fixtures",
        type=str,
        default=None,
        help="JSON fixture file (default: reference fixtures)",
    )
    parser.add_argument(
        "--write-fixtures",
        type=str,
        default=None,
        help="Also write the fixtures used to this JSON file",
    )
    parser.add_argument("--num-test-groups", type=int, default=None, help="Number of test files")
    parser.add_argument("--shard-capacity", type=int, default=None, help="Overloads per contract (default: 90)")
    parser.add_argument("--shuffle", action="store_true", help="Shuffle overloads before sharding")
    parser.add_argument(
        "--pseudo-rand",
        action="store_true",
        help="Use the seeded bit stream when shuffling",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for shuffling and fixtures")
    parser.add_argument("--public-decrypt", action="store_true", help="Generate public decrypt tests")
    parser.add_argument("--parent-contract", type=str, default=None, help="Contract to inherit setup from")
    parser.add_argument("--signers-import", type=str, default=None)
    parser.add_argument("--instance-import", type=str, default=None)
    parser.add_argument("--typechain-import", type=str, default=None)
    return parser


def config_from_args(args: argparse.Namespace, environ: Mapping[str, str]) -> GeneratorConfig:
    imports = None
    if args.signers_import and args.instance_import and args.typechain_import:
        imports = ImportConfig(args.signers_import, args.instance_import, args.typechain_import)

    return GeneratorConfig.from_environ(
        environ,
        imports=imports,
        options=EmitOptions(
            public_decrypt=args.public_decrypt,
            shuffle=args.shuffle,
            shuffle_with_pseudo_rand=args.pseudo_rand,
        ),
        num_test_groups=args.num_test_groups,
        shard_capacity=args.shard_capacity,
        seed=args.seed,
        parent_contract=args.parent_contract,
    )


def main(argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    environ = os.environ if environ is None else environ

    try:
        config = config_from_args(args, environ)
        fixtures = load_fixtures(args.fixtures) if args.fixtures else None
        result = generate_all(config, fixtures)
    except GenerationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    written = write_result(result, Path(args.contracts_dir), Path(args.tests_dir))
    if args.write_fixtures:
        used = fixtures or reference_fixtures(result.signatures, seed=config.seed)
        dump_fixtures(used, args.write_fixtures)
        print(f"Written fixtures to {args.write_fixtures}")

    stats = result.stats()
    print(f"Generated {len(written)} files")
    print(f"  Overloads: {stats['num_overloads']}")
    print(f"  Contracts: {stats['num_shards']} (max {stats['max_shard_size']} overloads)")
    print(f"  Test files: {stats['num_test_files']} ({stats['num_test_cases']} cases)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
