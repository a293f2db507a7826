"""Advisory cancellation for background workspace loads."""


class CancellationToken:
    """
    Flag checked after every await of a bootstrap or hydration task.

    Cancelling does not abort the in-flight request; the task simply
    discards its result instead of writing into the store.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled
