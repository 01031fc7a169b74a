"""Bounded-concurrency mapping over a thread pool, in the spirit of ``p-map``.

- ``p_map`` maps an iterable with at most ``concurrency`` mapper calls in
  flight and returns results in input order. The first error propagates and
  cancels work that has not started.
- ``p_map_settled`` never raises for mapper errors: every input yields a
  :class:`Settled` outcome carrying either a value or the exception, so one
  failing item cannot abort its siblings.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Generic, TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


@dataclass(frozen=True, slots=True)
class Settled(Generic[InT, OutT]):
    """Outcome of one mapper call; exactly one of ``value``/``error`` is meaningful."""

    item: InT
    value: OutT | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _check_concurrency(concurrency: int) -> None:
    if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")


def _drive(
    items: Iterator[tuple[int, InT]],
    mapper: Callable[[InT], object],
    concurrency: int,
    on_done: Callable[[int, Future], None],
) -> None:
    """Keep up to ``concurrency`` futures in flight; report each completion."""

    future_to_idx: dict[Future, int] = {}
    with ThreadPoolExecutor(max_workers=concurrency) as pool:

        def _submit() -> Future | None:
            try:
                idx, item = next(items)
            except StopIteration:
                return None
            fut = pool.submit(mapper, item)
            future_to_idx[fut] = idx
            return fut

        active: set[Future] = set()
        for _ in range(concurrency):
            fut = _submit()
            if fut is None:
                break
            active.add(fut)

        while active:
            done, active = wait(active, return_when=FIRST_COMPLETED)
            for fut in done:
                try:
                    on_done(future_to_idx.pop(fut), fut)
                except BaseException:
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise
            for _ in range(len(done)):
                fut = _submit()
                if fut is None:
                    break
                active.add(fut)


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int,
) -> list[OutT]:
    """Map ``iterable`` through ``mapper``; results keep input order."""

    _check_concurrency(concurrency)
    results: dict[int, OutT] = {}

    def _record(idx: int, fut: Future) -> None:
        results[idx] = fut.result()

    _drive(enumerate(iterable), mapper, concurrency, _record)
    return [results[i] for i in sorted(results)]


def p_map_settled(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int,
) -> list[Settled[InT, OutT]]:
    """Run every mapper call to completion and return one outcome per input."""

    _check_concurrency(concurrency)
    items = list(iterable)
    outcomes: dict[int, Settled[InT, OutT]] = {}

    def _record(idx: int, fut: Future) -> None:
        try:
            outcomes[idx] = Settled(item=items[idx], value=fut.result())
        except Exception as e:  # noqa: BLE001
            outcomes[idx] = Settled(item=items[idx], error=e)

    _drive(enumerate(items), mapper, concurrency, _record)
    return [outcomes[i] for i in range(len(items))]


__all__ = ["Settled", "p_map", "p_map_settled"]
