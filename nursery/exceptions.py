"""Nursery exception hierarchy.

Centralised base classes so callers can catch the whole family with
``except NurseryError`` or narrow down to a single failure kind.
Infeasible trough plans are *not* errors; see ``nursery.trough.LimitReason``.
"""


class NurseryError(Exception):
    """Root of all nursery domain exceptions."""


class InvalidInput(NurseryError, ValueError):
    """A non-positive rate, weight or time constant was supplied.

    Raised before any computation so nothing ever divides by zero.
    """


class Unresolvable(NurseryError, KeyError):
    """A species or food name is not present in the catalog."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class PersistenceError(NurseryError):
    """A persisted session record could not be decoded."""


class ConfigurationError(NurseryError):
    """Invalid or missing configuration."""
