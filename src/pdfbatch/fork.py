"""Fan-out/fan-in join for callback-style asynchronous operations.

Every operation is launched up front. Each one reports back through its own
``done(*results)`` signal; the shared callback runs exactly once, after the
last signal, with the results ordered by launch index rather than by the
order in which operations finished.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

logger = logging.getLogger(__name__)

Done = Callable[..., None]
Fail = Callable[[BaseException], None]
Operation = Callable[[Done, Fail], Any]


class Join:
    """Countdown shared by the operations of one ``fork`` call."""

    def __init__(
        self,
        count: int,
        callback: Callable[[list[tuple]], Any],
        errback: Optional[Callable[[int, BaseException], Any]] = None,
    ) -> None:
        self._remaining = count
        self._results: list[Optional[tuple]] = [None] * count
        self._signalled = [False] * count
        self._callback = callback
        self._errback = errback
        self._settled = False

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def settled(self) -> bool:
        return self._settled

    def done_signal(self, index: int) -> Done:
        def done(*results: Any) -> None:
            if self._settled:
                logger.debug("Ignoring completion of operation %d after join settled", index)
                return
            if self._signalled[index]:
                raise RuntimeError(f"Operation {index} signalled completion twice")
            self._signalled[index] = True
            self._results[index] = results
            self._remaining -= 1
            if self._remaining == 0:
                self._settled = True
                self._callback(list(self._results))
        return done

    def fail_signal(self, index: int) -> Fail:
        def fail(exc: BaseException) -> None:
            if self._settled:
                logger.debug("Ignoring failure of operation %d after join settled: %s", index, exc)
                return
            self._settled = True
            if self._errback is None:
                raise exc
            self._errback(index, exc)
        return fail

    def complete_empty(self) -> None:
        self._settled = True
        self._callback([])


def fork(
    operations: Sequence[Operation],
    callback: Callable[[list[tuple]], Any],
    errback: Optional[Callable[[int, BaseException], Any]] = None,
) -> Join:
    """Launch *operations* concurrently and join their results.

    Args:
        operations: Callables invoked as ``operation(done, fail)``. ``done``
            takes any number of positional results, captured as a tuple.
        callback: Called once with a list whose slot *i* holds operation
            *i*'s result tuple. With no operations it is called immediately
            with ``[]``.
        errback: Called once as ``errback(index, exc)`` for the first
            failure; the callback is then never called. An operation that
            raises while being launched counts as a failure, and operations
            after it are not launched.

    Returns:
        The Join, for inspecting ``remaining`` / ``settled``.
    """
    join = Join(len(operations), callback, errback)
    if not operations:
        join.complete_empty()
        return join

    for index, operation in enumerate(operations):
        if join.settled:
            break
        try:
            operation(join.done_signal(index), join.fail_signal(index))
        except Exception as exc:
            if join.settled:
                raise
            join.fail_signal(index)(exc)
    return join
