"""
Module: config
Purpose: Typed YAML config loading with mapping validation for the benchmark harness
Dependencies: yaml, typing
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, cast

import yaml


class ConfigError(ValueError):
    """User-fixable configuration error."""


def load_config(path: str) -> Mapping[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Unable to read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Config at {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} is not a mapping")
    return cast(Mapping[str, Any], data)


def parse_int(val: Any, default: int) -> int:
    """
    Resolve an integer setting from YAML, tolerating strings like "1_000".
    Booleans and unparsable values fall back to ``default``.
    """
    if isinstance(val, bool):
        return default
    if isinstance(val, int):
        return val
    if isinstance(val, str):
        try:
            return int(val.strip())
        except ValueError:
            return default
    return default


def parse_optional_int(val: Any) -> Optional[int]:
    if val is None:
        return None
    if isinstance(val, bool):
        raise ConfigError(f"Expected an integer or null, got {val!r}")
    try:
        return int(val)
    except (TypeError, ValueError):
        raise ConfigError(f"Expected an integer or null, got {val!r}") from None


VALID_FAMILIES = {"berk-jones", "ks"}
VALID_METHODS = ("two-sided-direct", "two-sided-fft", "one-sided-reference", "one-sided-new")


def _default_max_n() -> Dict[str, int]:
    # direct summation is too slow past 35k; the reference recursion turns to NaN past 30k
    return {"two-sided-direct": 35000, "one-sided-reference": 30000}


@dataclass
class BenchConfig:
    """Configuration for a timing run over a grid of sample sizes."""

    alpha: float = 0.05
    n_values: List[int] = field(default_factory=lambda: [10, 100, 1000])
    methods: List[str] = field(default_factory=lambda: list(VALID_METHODS))
    max_n: Dict[str, int] = field(default_factory=_default_max_n)
    repetitions: int = 1
    family: str = "berk-jones"
    ks_d: Optional[float] = None
    audit: Optional[str] = None
    fig: Optional[str] = None

    def validate(self) -> None:
        if not 0.0 < self.alpha < 1.0:
            raise ConfigError("alpha must be in (0, 1)")
        if not self.n_values or any(n <= 0 for n in self.n_values):
            raise ConfigError("n_values must contain positive integers")
        if not self.methods:
            raise ConfigError("methods must be non-empty")
        unknown = [m for m in self.methods if m not in VALID_METHODS]
        if unknown:
            raise ConfigError(f"unknown methods {unknown}; expected a subset of {list(VALID_METHODS)}")
        if any(m not in VALID_METHODS or v <= 0 for m, v in self.max_n.items()):
            raise ConfigError("max_n must map known methods to positive integers")
        if self.repetitions <= 0:
            raise ConfigError("repetitions must be a positive integer")
        if self.family not in VALID_FAMILIES:
            raise ConfigError(f"family must be one of {sorted(VALID_FAMILIES)}")
        if self.ks_d is not None and not 0.0 < self.ks_d < 1.0:
            raise ConfigError("ks_d must be in (0, 1)")

    def limit(self, method: str) -> Optional[int]:
        return self.max_n.get(method)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BenchConfig":
        known = {f.name for f in fields(cls)}
        extra = sorted(set(data) - known)
        if extra:
            raise ConfigError(f"unknown config keys: {extra}")
        kwargs: Dict[str, Any] = dict(data)
        if "repetitions" in kwargs:
            kwargs["repetitions"] = parse_int(kwargs["repetitions"], 1)
        if "n_values" in kwargs:
            kwargs["n_values"] = [parse_int(n, 0) for n in kwargs["n_values"] or []]
        if "max_n" in kwargs:
            merged = _default_max_n()
            for method, limit in (kwargs["max_n"] or {}).items():
                value = parse_optional_int(limit)
                if value is None:
                    merged.pop(method, None)
                else:
                    merged[method] = value
            kwargs["max_n"] = merged
        if "alpha" in kwargs:
            try:
                kwargs["alpha"] = float(kwargs["alpha"])
            except (TypeError, ValueError):
                raise ConfigError(f"alpha must be a number, got {kwargs['alpha']!r}") from None
        config = cls(**kwargs)
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, path: str | Path) -> "BenchConfig":
        return cls.from_mapping(load_config(str(path)))
