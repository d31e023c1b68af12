"""Core engine: scaling, phases, opponent affect and scoring."""
