"""Server configuration.

Values come from the dataclass defaults, then an optional YAML file
(`data/config/server_config.yml` unless `KVSTORE_CONFIG` points elsewhere),
then environment variables, each layer overriding the previous one.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path('data/config/server_config.yml')
CONFIG_PATH_ENV = 'KVSTORE_CONFIG'


@dataclass(frozen=True)
class Config:
    # Storage
    storage_backend: str = 'tarantool'
    tarantool_host: str = 'tarantool:3301'
    tarantool_user: str = ''
    tarantool_pass: str = ''
    space: str = 'kv'
    index: str = 'primary'
    pool_size: int = 4
    socket_timeout: float = 5.0
    acquire_timeout: float = 5.0
    atomic_update: bool = True

    # HTTP
    http_port: int = 8080
    request_timeout: float = 60.0
    enable_brotli: bool = False

    log_level: str = 'INFO'


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ('1', 'true', 'yes', 'on')


_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    'str': str,
    'int': int,
    'float': float,
    'bool': _to_bool,
}

# environment variable -> Config field
ENV_VARS = {
    'STORAGE_BACKEND': 'storage_backend',
    'TARANTOOL_HOST': 'tarantool_host',
    'TARANTOOL_USER': 'tarantool_user',
    'TARANTOOL_PASS': 'tarantool_pass',
    'TARANTOOL_SPACE': 'space',
    'TARANTOOL_INDEX': 'index',
    'TARANTOOL_POOL_SIZE': 'pool_size',
    'TARANTOOL_TIMEOUT': 'socket_timeout',
    'TARANTOOL_ACQUIRE_TIMEOUT': 'acquire_timeout',
    'KV_ATOMIC_UPDATE': 'atomic_update',
    'HTTP_PORT': 'http_port',
    'REQUEST_TIMEOUT': 'request_timeout',
    'ENABLE_BROTLI': 'enable_brotli',
    'LOG_LEVEL': 'log_level',
}


def _field_types() -> dict[str, str]:
    # annotations are strings under `from __future__ import annotations`
    return {f.name: str(f.type) for f in fields(Config)}


def _convert(name: str, raw: Any, source: str) -> Any:
    conv = _CONVERTERS[_field_types()[name]]
    try:
        return conv(raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid value {raw!r} for '{name}' from {source}") from e


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Read overrides from a YAML file. A missing file yields no overrides."""
    if not path.exists():
        return {}
    try:
        with path.open('r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"invalid config format in {path}: parse error") from e
    if not isinstance(data, dict):
        raise ValueError(f"invalid config format in {path}: expected mapping")
    known = _field_types()
    unknown = sorted(set(data) - set(known))
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ', '.join(unknown))
    return {k: _convert(k, v, str(path)) for k, v in data.items() if k in known}


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Config:
    env = os.environ if environ is None else environ
    if path is None:
        path = Path(env.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)

    overrides = load_yaml_config(Path(path))
    for var, name in ENV_VARS.items():
        if var in env:
            overrides[name] = _convert(name, env[var], f"${var}")

    config = replace(Config(), **overrides)
    if config.storage_backend not in ('tarantool', 'memory'):
        raise ValueError(f"unknown storage backend {config.storage_backend!r}")
    if config.pool_size < 1:
        raise ValueError("pool_size must be at least 1")
    return config
