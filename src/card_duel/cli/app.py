"""Shared Typer app object, shared option types, and rules utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config import GameRules
from ..core.engine.config_loader import load_game_rules

# Shared --level option type used across all commands
LevelOption = Annotated[
    int,
    typer.Option("--level", "-l", help="Player difficulty level 1..10 (5 = unscaled)"),
]

# Shared --json option type
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

# Shared --rules option type
RulesOption = Annotated[
    Optional[Path],
    typer.Option("--rules", "-r", help="Path to a game.yaml overriding the bundled rules"),
]

app = typer.Typer(
    name="card-duel",
    help="Exercise-card duel engine: scale targets, run phases, and simulate the opponent.",
    no_args_is_help=True,
)


def get_rules(rules_path: Path | None) -> GameRules:
    """
    Load game rules from the bundled YAML plus an optional override file.

    Raises:
        ValueError: If rules_path is given but missing, or holds invalid values
    """
    if rules_path is not None and not rules_path.exists():
        raise ValueError(f"Rules file not found: {rules_path}")
    return load_game_rules(rules_path)
