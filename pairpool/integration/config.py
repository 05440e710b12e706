"""
Configuration loading for pool deployments.

Sources, lowest precedence first:
- dataclass defaults,
- an optional YAML file (top-level mapping),
- environment variables (`PAIRPOOL_POOL_ACCOUNT`, `PAIRPOOL_MINIMUM_LIQUIDITY`).

Malformed values fail closed with `ValueError` rather than falling back to a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from ..core.pool_engine import PoolEngineConfig


ENV_POOL_ACCOUNT = "PAIRPOOL_POOL_ACCOUNT"
ENV_MINIMUM_LIQUIDITY = "PAIRPOOL_MINIMUM_LIQUIDITY"

_YAML_KEYS = frozenset({"pool_account", "minimum_liquidity"})


@dataclass(frozen=True)
class RouterConfig:
    # Account the asset ledger treats as the pool's custody address.
    pool_account: str = "pool"
    engine: PoolEngineConfig = PoolEngineConfig()

    def __post_init__(self) -> None:
        if not isinstance(self.pool_account, str) or not self.pool_account.strip():
            raise ValueError("pool_account must be a non-empty string")


def _parse_int(name: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError(f"{name} must be an int, got {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError as exc:
            raise ValueError(f"{name} must be an int, got {raw!r}") from exc
    raise ValueError(f"{name} must be an int, got {raw!r}")


def _env_str(env: Mapping[str, str], name: str) -> Optional[str]:
    raw = env.get(name)
    if raw is None:
        return None
    v = raw.strip()
    return v if v else None


def _read_yaml(path: Path) -> Mapping[str, Any]:
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    if obj is None:
        return {}
    if not isinstance(obj, Mapping):
        raise ValueError(f"config file {path} must contain a mapping")
    unknown = sorted(str(k) for k in obj.keys() if k not in _YAML_KEYS)
    if unknown:
        raise ValueError(f"unknown config keys in {path}: {', '.join(unknown)}")
    return obj


def load_config(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> RouterConfig:
    """
    Build a `RouterConfig` from an optional YAML file plus environment overrides.

    Args:
        path: YAML file with `pool_account` and/or `minimum_liquidity` keys
        env: Environment mapping (defaults to `os.environ`)

    Raises:
        ValueError: On unknown keys or malformed values
    """
    environ = os.environ if env is None else env
    pool_account = RouterConfig.pool_account
    minimum_liquidity = PoolEngineConfig.minimum_liquidity

    if path is not None:
        data = _read_yaml(Path(path))
        if "pool_account" in data:
            pool_account = data["pool_account"]
        if "minimum_liquidity" in data:
            minimum_liquidity = _parse_int("minimum_liquidity", data["minimum_liquidity"])

    env_account = _env_str(environ, ENV_POOL_ACCOUNT)
    if env_account is not None:
        pool_account = env_account
    env_minimum = _env_str(environ, ENV_MINIMUM_LIQUIDITY)
    if env_minimum is not None:
        minimum_liquidity = _parse_int(ENV_MINIMUM_LIQUIDITY, env_minimum)

    return RouterConfig(
        pool_account=pool_account,
        engine=PoolEngineConfig(minimum_liquidity=minimum_liquidity),
    )
