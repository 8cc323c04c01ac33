"""Single-threaded coordination context for observable server state."""

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

T = TypeVar("T")


class Coordinator:
    """Runs callables one at a time on a dedicated thread.

    Every mutation of a server's status and every delegate notification goes
    through here, so observers never see a half-applied transition.
    """

    def __init__(self, name: str = "pgprefs-main"):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._ident: int | None = None
        self._executor.submit(self._capture_thread).result()

    def _capture_thread(self) -> None:
        self._ident = threading.get_ident()

    def in_context(self) -> bool:
        """True when called from the coordination thread."""
        return threading.get_ident() == self._ident

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``fn`` on the coordination thread and wait for its result.

        Runs inline when already on that thread.
        """
        if self.in_context():
            return fn(*args, **kwargs)
        return self._executor.submit(fn, *args, **kwargs).result()

    def post(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        """Schedule ``fn`` on the coordination thread without waiting."""
        return self._executor.submit(fn, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "Coordinator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.shutdown()
        return False
