"""
Configuration Service

Plan rules (ramp, cutbacks, long-run growth, session clamps, focus
thresholds) with code defaults and an optional YAML overlay, so coaches
can tune the numbers without a deploy.

Usage:
    ramp = ConfigService.get("plan_rules.periodization.weekly_ramp")
    limits = ConfigService.get_session_limits()

    # Pick up an edited plan_rules.yaml
    ConfigService.reload()
"""

import copy
import logging
from functools import reduce
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

RULES_FILE = "plan_rules.yaml"
RULES_NAMESPACE = "plan_rules"


def _deep_merge(target: Dict[str, Any], overrides: Dict[str, Any]) -> None:
    """Merge overrides into target in place; nested dicts merge key by key."""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value


def _default_rules() -> Dict[str, Any]:
    from .constants import (
        BASE_LOAD_RULES,
        DEFAULT_PLAN_WEEKS,
        FOCUS_RULES,
        LONG_RUN_RULES,
        PERIODIZATION_RULES,
        SESSION_LIMITS,
    )

    return copy.deepcopy({
        "periodization": PERIODIZATION_RULES,
        "base_load": BASE_LOAD_RULES,
        "long_run": LONG_RUN_RULES,
        "session_limits": SESSION_LIMITS,
        "focus": FOCUS_RULES,
        "default_plan_weeks": DEFAULT_PLAN_WEEKS,
    })


class ConfigService:
    """
    Process-wide cache of plan rules.

    Rules live under the "plan_rules" namespace. A missing or unreadable
    YAML file leaves the code defaults in place.
    """

    _config: Optional[Dict[str, Any]] = None
    _config_dir: Path = Path(__file__).parent.parent.parent / "config"

    @classmethod
    def get(cls, key: str = None, default: Any = None) -> Any:
        """
        Look up a dot-separated key ("plan_rules.long_run.floor_km").

        Returns the whole config when key is None, default when any part
        of the path is missing.
        """
        config = cls._ensure_loaded()
        if key is None:
            return config
        try:
            return reduce(lambda node, part: node[part], key.split("."), config)
        except (KeyError, TypeError):
            return default

    @classmethod
    def set(cls, key: str, value: Any):
        """Override one key in memory (tests, experiments). Not persisted."""
        node = cls._ensure_loaded()
        *parents, leaf = key.split(".")
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

    @classmethod
    def reload(cls):
        cls._config = None
        cls._ensure_loaded()
        logger.info("Plan rules reloaded")

    @classmethod
    def _ensure_loaded(cls) -> Dict[str, Any]:
        if cls._config is None:
            cls._config = {RULES_NAMESPACE: _default_rules()}
            overrides = cls._read_rules_file()
            if overrides:
                _deep_merge(cls._config[RULES_NAMESPACE], overrides)
        return cls._config

    @classmethod
    def _read_rules_file(cls) -> Optional[Dict[str, Any]]:
        path = cls._config_dir / RULES_FILE
        if not path.exists():
            logger.debug(f"No rules file at {path}; using defaults")
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Ignoring unreadable {RULES_FILE}: {e}")
            return None
        if data is not None and not isinstance(data, dict):
            logger.error(f"Ignoring {RULES_FILE}: top level must be a mapping")
            return None
        logger.debug(f"Loaded rule overrides from {path}")
        return data

    # ------------------------------------------------------------------ #
    # Typed sections
    # ------------------------------------------------------------------ #

    @classmethod
    def _section(cls, name: str) -> Dict[str, Any]:
        return cls.get(f"{RULES_NAMESPACE}.{name}", {})

    @classmethod
    def get_periodization_rules(cls) -> Dict[str, Any]:
        return cls._section("periodization")

    @classmethod
    def get_base_load_rules(cls) -> Dict[str, Any]:
        return cls._section("base_load")

    @classmethod
    def get_long_run_rules(cls) -> Dict[str, Any]:
        return cls._section("long_run")

    @classmethod
    def get_session_limits(cls) -> Dict[str, Any]:
        return cls._section("session_limits")

    @classmethod
    def get_focus_rules(cls) -> Dict[str, Any]:
        return cls._section("focus")

    @classmethod
    def get_default_plan_weeks(cls) -> int:
        return cls.get(f"{RULES_NAMESPACE}.default_plan_weeks", 12)
