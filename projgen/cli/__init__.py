"""Command implementations for the projgen CLI."""

from .generate import generate_command
from .impact import impact_command
from .lint import lint_command

__all__ = ["generate_command", "impact_command", "lint_command"]
