"""
Load configuration from YAML.
Default: welcomekit/config/default.yaml. Override: --config <file> or WELCOMEKIT_CONFIG.
"""
import os
from pathlib import Path
from typing import Any

import yaml

from welcomekit.core.config import ENV_CONFIG, RECENTS_CAPACITY, RECENTS_SETTINGS_KEY
from welcomekit.core.exceptions import ConfigError

_CACHE: dict[str, Any] | None = None
_CONFIG_DIR = Path(__file__).resolve().parent


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base (recursive). base is not mutated."""
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError("Invalid YAML in %s: %s" % (path, e)) from e
    return data if isinstance(data, dict) else {}


def _defaults() -> dict:
    """Built-in defaults (no file)."""
    return {
        "recents": {
            "capacity": RECENTS_CAPACITY,
            "settings_key": RECENTS_SETTINGS_KEY,
            "storage_path": "~/.config/welcomekit/recents.json",
        },
        "settings": {"organization": "welcomekit", "application": "welcomekit"},
        "dialogs": {"open": {}, "save": {}},
    }


# Accepted keys per dialog section and their YAML types. Kinds are named by
# identifier ("public.plain-text") or extension ("txt").
_OPEN_DIALOG_KEYS = {
    "title": str,
    "allowed_kinds": list,
    "can_choose_files": bool,
    "can_choose_directories": bool,
    "directory": str,
}
_SAVE_DIALOG_KEYS = {
    "prompt": str,
    "name_field_label": str,
    "default_file_name": str,
    "allowed_kinds": list,
    "title": str,
    "directory": str,
    "default_kind": str,
}


def _validate_dialog(section: str, options: Any, known: dict) -> None:
    if options is None:
        return
    if not isinstance(options, dict):
        raise ConfigError("dialogs.%s must be a mapping" % section)
    for name, value in options.items():
        expected = known.get(name)
        if expected is None:
            raise ConfigError(
                "Unknown option dialogs.%s.%s (expected one of: %s)" % (section, name, ", ".join(sorted(known)))
            )
        if value is None and name == "directory":
            continue
        if not isinstance(value, expected):
            raise ConfigError("dialogs.%s.%s must be a %s, got %r" % (section, name, expected.__name__, value))
        if name == "allowed_kinds" and not all(isinstance(k, str) and k for k in value):
            raise ConfigError("dialogs.%s.allowed_kinds must be a list of kind names" % section)


def _validate(cfg: dict) -> None:
    capacity = (cfg.get("recents") or {}).get("capacity")
    if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity < 1:
        raise ConfigError("recents.capacity must be a positive integer, got %r" % (capacity,))
    key = (cfg.get("recents") or {}).get("settings_key")
    if not isinstance(key, str) or not key:
        raise ConfigError("recents.settings_key must be a non-empty string")
    dialogs = cfg.get("dialogs") or {}
    if not isinstance(dialogs, dict):
        raise ConfigError("dialogs must be a mapping")
    _validate_dialog("open", dialogs.get("open"), _OPEN_DIALOG_KEYS)
    _validate_dialog("save", dialogs.get("save"), _SAVE_DIALOG_KEYS)


def load_config(override_path: str | Path | None = None) -> dict:
    """
    Load config: built-in defaults + default.yaml + env WELCOMEKIT_CONFIG + optional override file.
    Returns merged dict. Cached after first call unless override_path is given.
    """
    global _CACHE
    if override_path is not None:
        _CACHE = None

    if _CACHE is not None:
        return _CACHE

    base = _defaults()
    default_file = _CONFIG_DIR / "default.yaml"
    if default_file.exists():
        base = _deep_merge(base, _load_yaml(default_file))

    env_path = os.environ.get(ENV_CONFIG)
    if env_path and Path(env_path).exists():
        base = _deep_merge(base, _load_yaml(Path(env_path)))

    if override_path is not None:
        p = Path(override_path)
        if not p.exists():
            raise ConfigError("Config file not found: %s" % p)
        base = _deep_merge(base, _load_yaml(p))

    _validate(base)
    _CACHE = base
    return base


def get_config(override_path: str | Path | None = None) -> dict:
    """Alias for load_config; use for read-only access."""
    return load_config(override_path)


def reset_config() -> None:
    """Clear cache (e.g. for tests)."""
    global _CACHE
    _CACHE = None


def recents_storage_path(cfg: dict | None = None) -> Path:
    cfg = cfg if cfg is not None else get_config()
    return Path(cfg["recents"]["storage_path"]).expanduser()


def _dialog_options(cfg: dict | None, section: str) -> dict:
    cfg = cfg if cfg is not None else get_config()
    options = dict((cfg.get("dialogs") or {}).get(section) or {})
    if options.get("directory"):
        options["directory"] = Path(options["directory"]).expanduser()
    return options


def open_dialog_options(cfg: dict | None = None) -> dict:
    """
    Validated dialogs.open settings with directory expanded to a Path. Kind names are
    left as strings; OpenDialogConfiguration.from_options() turns them into ContentKinds.
    """
    return _dialog_options(cfg, "open")


def save_dialog_options(cfg: dict | None = None) -> dict:
    """Validated dialogs.save settings, as open_dialog_options()."""
    return _dialog_options(cfg, "save")
