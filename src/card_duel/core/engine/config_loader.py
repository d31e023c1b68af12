"""
YAML → typed config loader.

Loads game rules from game.yaml (bundled with the package) and
optionally merges user overrides from ~/.card-duel/game.yaml.

Usage:
    from card_duel.core.engine.config_loader import load_game_rules
    rules = load_game_rules()
    steal = rules.steal_points

If the bundled YAML cannot be parsed, all lookups fall back to the Python
defaults from config.py (no crash).  If the user override file has parse
errors, a warning is emitted and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    AFFECT_VISIBILITY_MS,
    BONUS_POINTS,
    DOUBLE_FACTOR,
    SCORE_LEAD_THRESHOLD,
    STEAL_POINTS,
    TIE_MARGIN,
    GameRules,
)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; return {} (with a warning) on any error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"card-duel: ignoring config {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled game.yaml, or None if not found."""
    ref = importlib.resources.files("card_duel").joinpath("game.yaml")
    if ref.is_file():
        with importlib.resources.as_file(ref) as p:
            return p
    candidate = Path(__file__).parent.parent.parent / "game.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.card-duel/game.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".card-duel" / "game.yaml"
    return p if p.exists() else None


def load_game_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge game configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/card_duel/game.yaml
    2. User override at ~/.card-duel/game.yaml (or *user_path*)

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None and user.exists():
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config


def rules_from_config(config: dict[str, Any]) -> GameRules:
    """
    Map the ``scoring`` and ``affect`` sections onto GameRules.

    Missing keys fall back to the constants in config.py.

    Raises:
        ValueError: If a value is not an integer or violates GameRules limits
    """
    scoring = config.get("scoring", {}) or {}
    affect = config.get("affect", {}) or {}
    return GameRules(
        double_factor=int(scoring.get("DOUBLE_FACTOR", DOUBLE_FACTOR)),
        bonus_points=int(scoring.get("BONUS_POINTS", BONUS_POINTS)),
        steal_points=int(scoring.get("STEAL_POINTS", STEAL_POINTS)),
        affect_visibility_ms=int(affect.get("VISIBILITY_MS", AFFECT_VISIBILITY_MS)),
        score_lead_threshold=int(affect.get("SCORE_LEAD_THRESHOLD", SCORE_LEAD_THRESHOLD)),
        tie_margin=int(affect.get("TIE_MARGIN", TIE_MARGIN)),
    )


def load_game_rules(user_path: Path | None = None) -> GameRules:
    """Load GameRules from bundled + user YAML (see load_game_config)."""
    return rules_from_config(load_game_config(user_path))
