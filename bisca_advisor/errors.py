# bisca_advisor/errors.py
from __future__ import annotations


class BiscaError(Exception):
    """Base class for recoverable action errors. `kind` tags the category."""

    kind = "error"


class InvalidStateError(BiscaError):
    """Action attempted while the game status does not permit it."""

    kind = "invalid-state"


class InvalidConfigurationError(InvalidStateError):
    """`start` called with a configuration the game cannot be set up from."""


class InvalidTurnError(BiscaError):
    """Play submitted out of turn, or twice by the same player in a trick."""

    kind = "invalid-turn"


class MissingContextError(BiscaError):
    """No active round, or no tracked hand, when one is required."""

    kind = "missing-context"


class UnresolvableTrickError(BiscaError):
    """Trick resolution attempted with no cards played."""

    kind = "unresolvable-trick"
