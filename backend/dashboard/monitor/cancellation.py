"""Cooperative cancellation for reconciliation cycles."""


class CancellationToken:
    """Shared flag checked before a cycle commits any side effect.

    Cancelling does not interrupt a network call already in flight; it only
    guarantees that whatever that call returns is discarded.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
