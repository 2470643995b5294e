"""
Runtime Configuration

Central configuration for tree construction and logging.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

from core.crypto.hashing import HashFunction, field_hash, parse_node
from core.merkle.incremental_tree import IncrementalMerkleTree
from core.merkle.zeros import (
    DEFAULT_TREE_HEIGHT,
    DEFAULT_ZERO_LEAF,
    POSEIDON2_BN254_ZEROS,
    build_zero_table,
    check_zero_table,
)
from core.schemas.errors import ConfigurationException

load_dotenv()


ENV_PREFIX = "ZKPOOL_"

ZERO_TABLE_COMPUTED = "computed"
ZERO_TABLE_POSEIDON2 = "poseidon2"
ZERO_TABLE_CHOICES = (ZERO_TABLE_COMPUTED, ZERO_TABLE_POSEIDON2)


@dataclass
class TreeConfig:
    """Configuration for the commitment tree."""
    height: int = DEFAULT_TREE_HEIGHT
    zero_leaf: int = DEFAULT_ZERO_LEAF
    zero_table: str = ZERO_TABLE_COMPUTED  # "computed" or "poseidon2"

    def __post_init__(self):
        try:
            self.height = int(self.height)
            self.zero_leaf = parse_node(self.zero_leaf)
        except (TypeError, ValueError) as e:
            raise ConfigurationException(f"Invalid tree configuration: {e}") from e

        if self.height < 0:
            raise ConfigurationException(
                f"Tree height must be non-negative, got {self.height}",
                details={"height": self.height},
            )
        if self.zero_table not in ZERO_TABLE_CHOICES:
            raise ConfigurationException(
                f"Unknown zero table {self.zero_table!r}, "
                f"expected one of {', '.join(ZERO_TABLE_CHOICES)}",
                details={"zero_table": self.zero_table},
            )

    def build_zeros(self, hash_fn: HashFunction = field_hash) -> list[int]:
        """
        Zero table for this configuration.

        The poseidon2 table is fixed and ignores zero_leaf and hash_fn.
        """
        if self.zero_table == ZERO_TABLE_POSEIDON2:
            if self.height + 1 > len(POSEIDON2_BN254_ZEROS):
                raise ConfigurationException(
                    f"Poseidon2 zero table supports height up to "
                    f"{len(POSEIDON2_BN254_ZEROS) - 1}, got {self.height}",
                    details={"height": self.height},
                )
            return list(POSEIDON2_BN254_ZEROS[: self.height + 1])
        return build_zero_table(self.zero_leaf, self.height, hash_fn)


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    tree: TreeConfig = field(default_factory=TreeConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - ZKPOOL_TREE_HEIGHT: Tree height
        - ZKPOOL_ZERO_LEAF: Empty-leaf value (hex or decimal)
        - ZKPOOL_ZERO_TABLE: "computed" or "poseidon2"
        - ZKPOOL_LOG_LEVEL: Log level name
        - ZKPOOL_LOG_FILE: Optional log file path
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}TREE_HEIGHT"):
            overrides.setdefault("tree", {})["height"] = os.getenv(f"{ENV_PREFIX}TREE_HEIGHT")
        if os.getenv(f"{ENV_PREFIX}ZERO_LEAF"):
            overrides.setdefault("tree", {})["zero_leaf"] = os.getenv(f"{ENV_PREFIX}ZERO_LEAF")
        if os.getenv(f"{ENV_PREFIX}ZERO_TABLE"):
            overrides.setdefault("tree", {})["zero_table"] = os.getenv(f"{ENV_PREFIX}ZERO_TABLE")

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Config file must contain a mapping, got {type(data).__name__}",
                details={"path": str(path)},
            )
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        tree_data = data.get("tree", {}) or {}
        if not isinstance(tree_data, dict):
            raise ConfigurationException("'tree' section must be a mapping")

        unknown = set(tree_data) - {"height", "zero_leaf", "zero_table"}
        if unknown:
            raise ConfigurationException(
                f"Unknown tree settings: {', '.join(sorted(unknown))}",
                details={"unknown": sorted(unknown)},
            )

        return cls(
            tree=TreeConfig(**tree_data),
            log_level=str(data.get("log_level", "INFO")).upper(),
            log_file=data.get("log_file"),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        data = self.to_dict()
        data["tree"].update(overrides.get("tree", {}))
        for key in ("log_level", "log_file"):
            if key in overrides:
                data[key] = overrides[key]
        return self.from_dict(data)

    def create_tree(self, hash_fn: HashFunction = field_hash) -> IncrementalMerkleTree:
        """
        Build an empty tree from the tree section.

        Raises:
            ConfigurationException: If the zero table was not produced by hash_fn
                (e.g. the poseidon2 table with the default field hash)
        """
        zeros = self.tree.build_zeros(hash_fn)
        check_zero_table(zeros, hash_fn)
        return IncrementalMerkleTree(self.tree.height, zeros, hash_fn=hash_fn)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "tree": {
                "height": self.tree.height,
                "zero_leaf": hex(self.tree.zero_leaf),
                "zero_table": self.tree.zero_table,
            },
            "log_level": self.log_level,
            "log_file": self.log_file,
        }

