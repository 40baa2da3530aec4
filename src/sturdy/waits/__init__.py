"""Polling condition waits."""

from sturdy.waits.waiter import Waiter

__all__ = ["Waiter"]
