"""
CLI entry point using Typer.

Provides commands for the duel engine:
- catalog: List exercises with scaled targets and card points
- scale: Show one exercise's target for a difficulty level
- affect: Derive the opponent's emotion for a game state
- simulate: Play a seeded duel against the opponent
"""

from .app import app

# Command modules register themselves on the shared app.
from .commands import cards, duel  # noqa: F401

__all__ = ["app"]


if __name__ == "__main__":
    app()
