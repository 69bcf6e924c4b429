"""Cancel scopes for dropping responses that arrive too late.

The underlying HTTP call is never aborted. A scope only records that
whoever started the call no longer wants its result.
"""

import itertools

_scope_ids = itertools.count(1)


class CancelScope:
    """One-shot cancellation marker shared by a caller and its request."""

    def __init__(self, label: str = ""):
        self.id = next(_scope_ids)
        self.label = label
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Mark scope cancelled. Safe to call more than once."""
        self._cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"CancelScope(id={self.id}, label={self.label!r}, {state})"
