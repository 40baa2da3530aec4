"""Resilient high-level interactions."""

from sturdy.interactions.interactions import Interactions

__all__ = ["Interactions"]
