"""squadlens: who is doing what in a squad workspace, and why."""

__version__ = "0.4.0"
