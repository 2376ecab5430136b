"""Clue and hint disclosure state machine."""

from detective_core.disclosure.tracker import DisclosureTracker

__all__ = ["DisclosureTracker"]
