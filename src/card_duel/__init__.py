"""card-duel: exercise-card duel session engine."""

__version__ = "0.3.0"
