from __future__ import annotations

import copy
import hashlib
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Tuple

import yaml


ENV_PREFIX = "BINGO_EVAL_"

# Keys that change what a run produces; output and UX settings stay out.
HASHED_KEYS = ("games", "mode", "samples", "alpha", "seed.engine", "seed.value")

PATH_KEYS = ("out_transcript", "out_report", "position_csv", "log_file")

DEFAULTS: Dict[str, Any] = {
    "colors": "auto",
    "log_level": "INFO",
    "log_format": "text",
    "games": 1,
    "mode": "ai_vs_ai",
    "samples": 10000,
    "alpha": 0.01,
    "seed": {"engine": "system"},
}


def _lenient(convert: Callable[[str], Any]) -> Callable[[str], Any]:
    def inner(raw: str) -> Any:
        try:
            return convert(raw)
        except ValueError:
            return raw

    return inner


# ENV suffix -> (dotted config key, converter)
ENV_KEYS: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "GAMES": ("games", _lenient(int)),
    "MODE": ("mode", str),
    "SAMPLES": ("samples", _lenient(int)),
    "ALPHA": ("alpha", _lenient(float)),
    "SEED_ENGINE": ("seed.engine", str),
    "SEED_VALUE": ("seed.value", _lenient(int)),
    "COLORS": ("colors", str),
    "LOG_LEVEL": ("log_level", str),
    "LOG_FORMAT": ("log_format", str),
    "LOG_FILE": ("log_file", str),
    "OUT_TRANSCRIPT": ("out_transcript", str),
    "OUT_REPORT": ("out_report", str),
    "POSITION_CSV": ("position_csv", str),
}


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    suffix = config_path.suffix.lower()
    text = config_path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported config extension: {suffix}")
    if not isinstance(data, dict):
        raise ValueError(f"Top-level config in {config_path.name} must be a mapping")
    return data


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    return {
        key: convert(env[ENV_PREFIX + suffix])
        for suffix, (key, convert) in ENV_KEYS.items()
        if ENV_PREFIX + suffix in env
    }


def _merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply overrides; dotted keys set one leaf of a nested mapping."""
    merged = copy.deepcopy(base)
    for dotted, value in overrides.items():
        *parents, leaf = dotted.split(".")
        cursor = merged
        for part in parents:
            if not isinstance(cursor.get(part), dict):
                cursor[part] = {}
            cursor = cursor[part]
        cursor[leaf] = value
    return merged


def _lookup(source: Mapping[str, Any], dotted: str) -> Any:
    cur: Any = source
    for part in dotted.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            return None
        cur = cur[part]
    return cur


def compute_params_hash(resolved: Mapping[str, Any]) -> str:
    contract = {key: _lookup(resolved, key) for key in HASHED_KEYS}
    payload = json.dumps(
        {k: v for k, v in contract.items() if v is not None},
        ensure_ascii=True,
        sort_keys=True,
        separators=(",", ":"),
    )
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _normalize_paths(
    resolved: Dict[str, Any], config_dir: Path | None, cli_overrides: Mapping[str, Any]
) -> Dict[str, Any]:
    """CLI paths are relative to CWD, config-file paths to the config's directory."""
    result = dict(resolved)
    for key in PATH_KEYS:
        value = resolved.get(key)
        if not value:
            continue
        path = Path(str(value))
        if not path.is_absolute():
            base = Path.cwd() if key in cli_overrides else (config_dir or Path.cwd())
            path = (base / path).resolve()
        result[key] = str(path)
    return result


def resolve_parameters(
    *,
    config_path_str: str | None,
    cli_overrides: Dict[str, Any],
    env: Mapping[str, str] | None = None,
) -> Tuple[Dict[str, Any], str, Path | None]:
    """Resolve parameters with precedence CLI > ENV > config > defaults.

    Returns (resolved_params, params_hash, config_path)
    """
    config_path = Path(config_path_str).resolve() if config_path_str else None
    file_cfg = _read_config_file(config_path) if config_path else {}
    env_cfg = _env_overrides(os.environ if env is None else env)

    merged = _merge(DEFAULTS, file_cfg)
    merged = _merge(merged, env_cfg)
    merged = _merge(merged, cli_overrides)
    merged = _normalize_paths(merged, config_path.parent if config_path else None, cli_overrides)

    return merged, compute_params_hash(merged), config_path
