from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from dotenv import load_dotenv

from distri_mirror.core.constants import (
    CONFIG_DIR,
    DEVNET_RPC_URL,
    MIRROR_DB_PATH,
)
from distri_mirror.config.rpc import redacted
from distri_mirror.core.errors import ConfigError

logger = logging.getLogger(__name__)

MERGE_PRECEDENCE = ("defaults", "env", "json")  # JSON wins (highest priority)
SENSITIVE_NAME_TOKENS: Tuple[str, ...] = ("TOKEN", "KEY", "SECRET", "PASSWORD", "API")
ENV_JSON_PATH_VAR = "DISTRI_CONFIG_JSON"
ENV_OVERRIDES_VAR = "DISTRI_CONFIG_OVERRIDES_JSON"
VALID_COMMITMENTS = ("processed", "confirmed", "finalized")

# plain env var -> (section, key)
ENV_VARS: Dict[str, Tuple[str, str]] = {
    "RPC_URL": ("chain", "rpc_url"),
    "WS_URL": ("chain", "ws_url"),
    "PROGRAM_ID": ("chain", "program_id"),
    "COMMITMENT": ("chain", "commitment"),
    "MIRROR_DB_PATH": ("database", "path"),
}


def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in b.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _expand_env(obj: Any) -> Any:
    if isinstance(obj, str):
        return os.path.expandvars(os.path.expanduser(obj))
    if isinstance(obj, list):
        return [_expand_env(x) for x in obj]
    if isinstance(obj, dict):
        return {k: _expand_env(v) for k, v in obj.items()}
    return obj


def _contains_unexpanded_vars(value: Any) -> bool:
    if isinstance(value, str):
        return bool(re.search(r"(?<!\\)\$\{[^}]+\}|(?<!\\)\$[A-Za-z_]\w*", value))
    if isinstance(value, dict):
        return any(_contains_unexpanded_vars(v) for v in value.values())
    if isinstance(value, list):
        return any(_contains_unexpanded_vars(v) for v in value)
    return False


def _redact_value(key: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    if any(tok in key.upper() for tok in SENSITIVE_NAME_TOKENS):
        return "****" if len(value) <= 4 else f"{'*' * 4}…{value[-4:]}"
    if key.endswith("_url"):
        return redacted(value)
    return value


def _redacted_dict(d: Any) -> Any:
    if isinstance(d, dict):
        return {k: _redacted_dict(v) if isinstance(v, (dict, list)) else _redact_value(k, v) for k, v in d.items()}
    if isinstance(d, list):
        return [_redacted_dict(v) for v in d]
    return d


def _first_existing_path(cands: Iterable[Path]) -> Path | None:
    for p in cands:
        if p and p.exists():
            return p
    return None


def _load_defaults() -> Dict[str, Any]:
    return {
        "chain": {
            "rpc_url": DEVNET_RPC_URL,
            "ws_url": "",
            "program_id": "",
            "commitment": "finalized",
        },
        "database": {"path": str(MIRROR_DB_PATH)},
        "supervisor": {
            "reconnect_delay_seconds": 0.5,
            "max_reconnect_delay_seconds": 5.0,
            "connect_attempts": 5,
        },
    }


def _load_json_config(preferred_path: Optional[Union[str, os.PathLike]] = None) -> Tuple[Dict[str, Any], Path | None]:
    """
    Load JSON config. An explicit path must exist; otherwise the env hint and
    the default location are tried and a missing file is not an error.
    """
    if preferred_path:
        p = Path(preferred_path).expanduser()
        if not p.exists():
            raise ConfigError(f"Config JSON not found: {p}")
        candidates: Tuple[Optional[Path], ...] = (p,)
    else:
        env_path = os.getenv(ENV_JSON_PATH_VAR)
        candidates = (
            Path(env_path).expanduser() if env_path else None,
            CONFIG_DIR / "distri_mirror.json",
        )
    chosen = _first_existing_path([c for c in candidates if c])
    if not chosen:
        logger.info("No JSON config file found.")
        return {}, None
    try:
        data = json.loads(chosen.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config JSON {chosen} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("Top-level JSON must be an object")
    return data, chosen


def _load_env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    raw = os.getenv(ENV_OVERRIDES_VAR, "").strip()
    if raw:
        try:
            obj = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{ENV_OVERRIDES_VAR} is not valid JSON: {e}") from e
        if not isinstance(obj, dict):
            raise ConfigError(f"{ENV_OVERRIDES_VAR} must be a JSON object")
        out = _deep_merge(out, obj)
    for var, (section, key) in ENV_VARS.items():
        value = os.getenv(var, "").strip()
        if value:
            out = _deep_merge(out, {section: {key: value}})
    return out


def derive_ws_url(rpc_url: str) -> str:
    """http(s) -> ws(s); anything else is returned untouched."""
    if rpc_url.startswith("http"):
        return rpc_url.replace("http", "ws", 1)
    return rpc_url


def _assert_min_schema(cfg: Dict[str, Any]) -> None:
    chain = cfg.get("chain")
    if not isinstance(chain, dict):
        raise ConfigError("config.chain must be an object")
    if not chain.get("program_id"):
        raise ConfigError("Missing chain.program_id (set PROGRAM_ID in .env or the JSON config)")
    if not chain.get("rpc_url"):
        raise ConfigError("Missing chain.rpc_url")
    if str(chain.get("commitment", "")).lower() not in VALID_COMMITMENTS:
        raise ConfigError(f"chain.commitment must be one of {', '.join(VALID_COMMITMENTS)}")
    if not cfg.get("database", {}).get("path"):
        raise ConfigError("Missing database.path")
    sup = cfg.get("supervisor", {})
    for key in ("reconnect_delay_seconds", "max_reconnect_delay_seconds"):
        val = sup.get(key)
        if not isinstance(val, (int, float)) or val < 0:
            raise ConfigError(f"supervisor.{key} must be a non-negative number")
    attempts = sup.get("connect_attempts")
    if not isinstance(attempts, int) or attempts < 1:
        raise ConfigError("supervisor.connect_attempts must be a positive integer")


def _assert_no_unexpanded_vars(cfg: Dict[str, Any]) -> None:
    if _contains_unexpanded_vars(cfg):
        raise ConfigError("Unexpanded environment variable placeholder detected in config (e.g., ${VAR}).")


def redacted_view(cfg: Dict[str, Any]) -> Dict[str, Any]:
    return _redacted_dict(cfg)  # type: ignore[return-value]


def get_config(cfg_path: Optional[Union[str, os.PathLike]] = None) -> Dict[str, Any]:
    """
    Load merged configuration.
    Optional cfg_path lets callers pass an explicit JSON file path.
    """
    load_dotenv()
    json_cfg, json_path = _load_json_config(cfg_path)

    merged = _deep_merge(_load_defaults(), _load_env_overrides())
    merged = _deep_merge(merged, json_cfg)  # JSON wins

    merged = _expand_env(merged)
    _assert_no_unexpanded_vars(merged)
    _assert_min_schema(merged)

    chain = merged["chain"]
    chain["commitment"] = str(chain["commitment"]).lower()
    if not chain.get("ws_url"):
        chain["ws_url"] = derive_ws_url(chain["rpc_url"])

    which = str(json_path) if json_path else "<none>"
    logger.info("Config loaded. JSON=%s  Precedence=%s", which, " < ".join(MERGE_PRECEDENCE))
    return merged


__all__ = ["get_config", "redacted_view", "derive_ws_url"]
