# overload_gen/config.py
"""Configuration passed explicitly into the generator."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping

from .errors import MissingRequiredConfiguration
from .shards import DEFAULT_SEED, DEFAULT_SHARD_CAPACITY, ShuffleMode
from .signatures import DEFAULT_SHIFT_AMOUNT_BITS

ENV_PREFIX = "OVERLOAD_GEN_"

DEFAULT_CONTRACT_IMPORTS = (
    'import "../../lib/FHE.sol"',
    'import "../CoprocessorSetup.sol"',
)


@dataclass(frozen=True)
class ImportConfig:
    """Import paths used verbatim in generated TypeScript preambles."""
    signers: str
    instance: str
    typechain: str


@dataclass(frozen=True)
class EmitOptions:
    public_decrypt: bool = False
    shuffle: bool = False
    shuffle_with_pseudo_rand: bool = False

    @property
    def shuffle_mode(self) -> ShuffleMode:
        if not self.shuffle:
            return ShuffleMode.NONE
        if self.shuffle_with_pseudo_rand:
            return ShuffleMode.PSEUDO_RANDOM
        return ShuffleMode.NON_DETERMINISTIC


@dataclass(frozen=True)
class GeneratorConfig:
    """Everything a generation run needs besides operators, types and fixtures."""
    imports: ImportConfig
    options: EmitOptions = field(default_factory=EmitOptions)
    num_test_groups: int = 1
    shard_capacity: int = DEFAULT_SHARD_CAPACITY
    shift_amount_bits: int = DEFAULT_SHIFT_AMOUNT_BITS
    seed: int = DEFAULT_SEED
    parent_contract: str | None = None
    contract_imports: tuple[str, ...] = DEFAULT_CONTRACT_IMPORTS

    def __post_init__(self):
        if self.num_test_groups < 1:
            raise ValueError(f"num_test_groups must be positive, got {self.num_test_groups}")
        if self.shard_capacity < 1:
            raise ValueError(f"shard_capacity must be positive, got {self.shard_capacity}")
        if self.shift_amount_bits < 1:
            raise ValueError(f"shift_amount_bits must be positive, got {self.shift_amount_bits}")

    @classmethod
    def from_environ(cls, environ: Mapping[str, str], **overrides) -> GeneratorConfig:
        """Build a config from an environment mapping.

        The three import paths are required; numeric settings are optional.
        Keyword overrides win over the environment.
        """
        imports = overrides.pop("imports", None) or ImportConfig(
            signers=require(environ, f"{ENV_PREFIX}SIGNERS_IMPORT"),
            instance=require(environ, f"{ENV_PREFIX}INSTANCE_IMPORT"),
            typechain=require(environ, f"{ENV_PREFIX}TYPECHAIN_IMPORT"),
        )

        values = {}
        for key, name in (
            ("num_test_groups", "NUM_TEST_GROUPS"),
            ("shard_capacity", "SHARD_CAPACITY"),
            ("shift_amount_bits", "SHIFT_AMOUNT_BITS"),
            ("seed", "SEED"),
        ):
            raw = environ.get(f"{ENV_PREFIX}{name}")
            if raw:
                values[key] = int(raw, 0)
        parent = environ.get(f"{ENV_PREFIX}PARENT_CONTRACT")
        if parent:
            values["parent_contract"] = parent

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(imports=imports, **values)


def require(environ: Mapping[str, str], key: str) -> str:
    """Return a required configuration value or fail."""
    value = environ.get(key)
    if not value:
        raise MissingRequiredConfiguration(f"Missing required configuration value: {key}")
    return value
