from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from wrestling_roster_manager.domain.errors import ConfigError
from wrestling_roster_manager.domain.result import Err, Ok, Result

_DEFAULTS: dict[str, object] = {
    "db": {
        "path": "~/.config/wrm/roster.db",
    },
    "store": {
        "max_batch_size": 499,
    },
    "session": {
        "id": "",
    },
}


@dataclass(frozen=True)
class StoreSettings:
    db_path: Path
    max_batch_size: int
    default_session_id: str | None = None


def create_config(
    yaml_path: str = "wrestling.yaml",
    env_prefix: str = "WRESTLING",
    defaults: dict[str, object] | None = None,
    *,
    db_path: str | None = None,
    session_id: str | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file.
        env_prefix: Prefix for environment variables.
        defaults: Default configuration values.
        db_path: Override the database path (from ``--db``).
        session_id: Override the default session (from ``--session``).
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]

    overrides = _build_overrides(db_path, session_id)
    if overrides:
        layers.insert(0, config_from_dict(overrides))

    return ConfigurationSet(*layers)


def _build_overrides(db_path: str | None, session_id: str | None) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if db_path is not None:
        overrides["db"] = {"path": db_path}
    if session_id is not None:
        overrides["session"] = {"id": session_id}
    return overrides


def load_store_settings(cfg: ConfigurationSet | None = None) -> Result[StoreSettings, ConfigError]:
    if cfg is None:
        cfg = create_config()
    key = "store.max_batch_size"
    raw_batch = cfg[key]
    try:
        max_batch_size = int(str(raw_batch))
    except ValueError:
        return Err(ConfigError(message=f"store.max_batch_size must be an integer, got {raw_batch!r}", key=key))
    if max_batch_size < 1:
        return Err(ConfigError(message=f"store.max_batch_size must be positive, got {max_batch_size}", key=key))

    raw_path = str(cfg["db.path"]).strip()
    if not raw_path:
        return Err(ConfigError(message="db.path is not set", key="db.path"))
    db_path = Path(raw_path) if raw_path == ":memory:" else Path(raw_path).expanduser()

    session_id = str(cfg.get("session.id", "") or "").strip()
    return Ok(
        StoreSettings(
            db_path=db_path,
            max_batch_size=max_batch_size,
            default_session_id=session_id or None,
        )
    )
