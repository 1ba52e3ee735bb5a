"""
ProjectConfig: Project-level configuration loader for stablehash.

This module provides:

- find_config_file: Walk up directories to locate .stablehash.toml
- deep_merge: Recursively merge two dicts (override wins for leaf values)
- ProjectInfo: Typed project metadata
- PartitionScheme: A named bucket layout for sharding by fingerprint
- ProjectConfig: Main config object with load/partition interface

Configuration is loaded from `.stablehash.toml` with optional
`.stablehash.local.toml` overrides. The resolution order is:

    base partition table → local overrides

Example:
    >>> config = ProjectConfig.load()
    >>> scheme = config.partition("shards")
    >>> scheme.buckets
    16
    >>> scheme.bucket_for("ef46db3751d8e999")
    9
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from stablehash.numeric import modulo

CONFIG_FILENAME = ".stablehash.toml"
LOCAL_CONFIG_FILENAME = ".stablehash.local.toml"


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """
    Return the nearest `.stablehash.toml` at or above *start_dir* (default:
    cwd), or ``None`` when no ancestor directory holds one.
    """
    start = (start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge *override* into a copy of *base*, recursing into nested tables.

    Leaf values from *override* win. Neither input is mutated.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _read_toml(path: Path) -> dict[str, Any]:
    return tomllib.loads(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectInfo:
    """
    Typed project metadata from the ``[project]`` table.

    Attributes:
        name: Human-readable project name.
        default_partition: Partition scheme used when none is named.
    """

    name: str
    default_partition: str | None = None


@dataclass(frozen=True)
class PartitionScheme:
    """
    A named bucket layout from ``[partitions.NAME]``.

    Attributes:
        name: Scheme name (the TOML key under ``[partitions]``).
        buckets: Number of buckets; always a positive integer.
        description: Optional free-text description.
    """

    name: str
    buckets: int
    description: str = ""

    def __post_init__(self) -> None:
        buckets = self.buckets
        if isinstance(buckets, bool) or not isinstance(buckets, int) or buckets <= 0:
            raise ValueError(
                f"Partition {self.name!r}: buckets must be a positive integer, "
                f"got {buckets!r}"
            )

    def bucket_for(self, fp: str) -> int:
        """Return the bucket index in ``[0, buckets)`` for fingerprint *fp*."""
        return modulo(fp, self.buckets)


@dataclass
class ProjectConfig:
    """
    Main project configuration loaded from ``.stablehash.toml``.

    Holds the parsed project metadata and partition tables along with any
    local overrides from ``.stablehash.local.toml``. Use :meth:`partition`
    to get a validated :class:`PartitionScheme`.

    Typical usage::

        config = ProjectConfig.load()
        scheme = config.partition()           # uses default_partition
        scheme = config.partition("shards")   # explicit scheme
    """

    project: ProjectInfo
    partitions: dict[str, dict[str, Any]]
    _local_overrides: dict[str, Any] = field(default_factory=dict, repr=False)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, start_dir: Path | None = None) -> ProjectConfig:
        """
        Find and load project configuration.

        Walks up from *start_dir* (default: cwd) to locate
        ``.stablehash.toml``, parses it, and picks up
        ``.stablehash.local.toml`` from the same directory if present.

        Raises:
            FileNotFoundError: If no ``.stablehash.toml`` is found.
        """
        config_path = find_config_file(start_dir)
        if config_path is None:
            raise FileNotFoundError(
                f"Could not find {CONFIG_FILENAME} in {start_dir or Path.cwd()} "
                f"or any parent directory"
            )

        local_path = config_path.with_name(LOCAL_CONFIG_FILENAME)
        return cls.from_dict(
            _read_toml(config_path),
            local_overrides=_read_toml(local_path) if local_path.is_file() else None,
        )

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        local_overrides: dict[str, Any] | None = None,
    ) -> ProjectConfig:
        """
        Create a :class:`ProjectConfig` from a parsed TOML dict.

        Args:
            data: Parsed TOML data (from the base config file).
            local_overrides: Optional parsed TOML data from the local override
                file, applied during :meth:`partition`.
        """
        local_overrides = local_overrides or {}

        project_raw = data.get("project", {})
        project = ProjectInfo(
            name=project_raw.get("name", ""),
            default_partition=project_raw.get("default_partition"),
        )

        partitions: dict[str, dict[str, Any]] = {
            name: dict(table) for name, table in data.get("partitions", {}).items()
        }

        return cls(
            project=project,
            partitions=partitions,
            _local_overrides=local_overrides,
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    @property
    def default_partition(self) -> str | None:
        """Default scheme name, honouring local overrides."""
        local_project = self._local_overrides.get("project", {})
        return local_project.get("default_partition", self.project.default_partition)

    def partition_names(self) -> list[str]:
        """All scheme names, including those only defined locally."""
        local = self._local_overrides.get("partitions", {})
        return sorted(self.partitions.keys() | local.keys())

    def partition(self, name: str | None = None) -> PartitionScheme:
        """
        Resolve a named partition scheme.

        If *name* is ``None``, uses ``project.default_partition`` (including
        local overrides).

        Raises:
            ValueError: If no scheme name can be determined, the scheme does
                not exist, or its bucket count is invalid.
        """
        name = name or self.default_partition
        available = ", ".join(self.partition_names()) or "(none)"
        if name is None:
            raise ValueError(
                "No partition specified and no default_partition set in [project]. "
                f"Available partitions: {available}"
            )

        local_table = self._local_overrides.get("partitions", {}).get(name)
        if name not in self.partitions and local_table is None:
            raise ValueError(
                f"Unknown partition {name!r}. Available partitions: {available}"
            )

        table = deep_merge(self.partitions.get(name, {}), local_table or {})
        if "buckets" not in table:
            raise ValueError(f"Partition {name!r} has no buckets setting")

        return PartitionScheme(
            name=name,
            buckets=table["buckets"],
            description=table.get("description", ""),
        )
