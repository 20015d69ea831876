"""
Recalculation coordinator.

Every selection change bumps ``sequence`` and (re)issues the derived
computations tagged with it. A result is published only if its tag is
still the current sequence; older results are discarded silently, so a
slow answer for an earlier selection never overwrites a faster answer for
a later one. Debouncing only saves work: correctness rests on the tag check.

Per request:

    IDLE -> PENDING -> APPLIED
                    -> SUPERSEDED
                    -> FAILED      (non-transient error, see ``last_error``)

Usage:
    coordinator = RecalculationCoordinator(
        validator=partial(validate, definition),
        pricer=backend_price,          # sync or async callable(selection)
        availability=backend_stock,
        on_publish=render,
        debounce=0.15,
    )
    coordinator.schedule(selection.snapshot())   # inside the event loop
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from configurator.exceptions import TransientComputationFailure
from configurator.protocols.results import AvailabilityVerdict, PriceBreakdown, StructuralViolation
from configurator.selection import SelectionState

logger = logging.getLogger(__name__)

# Request states kept for inspection; older ones are dropped.
STATE_HISTORY = 64


class RecalculationState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    APPLIED = "applied"
    SUPERSEDED = "superseded"
    FAILED = "failed"


@dataclass(frozen=True)
class Evaluation:
    """Jointly committed results for one sequence number."""

    sequence: int
    violations: tuple[StructuralViolation, ...] = ()
    price: PriceBreakdown | None = None
    availability: AvailabilityVerdict | None = None
    warnings: tuple[str, ...] = ()
    degraded: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def is_available(self) -> bool | None:
        return self.availability.available if self.availability else None


async def _call(fn: Callable[[SelectionState], Any] | None, snapshot: SelectionState) -> Any:
    if fn is None:
        return None
    if inspect.iscoroutinefunction(fn):
        return await fn(snapshot)
    return await asyncio.to_thread(fn, snapshot)


class RecalculationCoordinator:
    def __init__(
        self,
        validator: Callable[[SelectionState], list[StructuralViolation]],
        pricer: Callable[[SelectionState], Any] | None = None,
        availability: Callable[[SelectionState], Any] | None = None,
        on_publish: Callable[[Evaluation], None] | None = None,
        on_error: Callable[[int, Exception], None] | None = None,
        debounce: float = 0.0,
    ) -> None:
        self._validator = validator
        self._pricer = pricer
        self._availability = availability
        self._on_publish = on_publish
        self._on_error = on_error
        self.debounce = debounce

        self.sequence = 0
        self.published: Evaluation | None = None
        self.last_error: Exception | None = None
        self._states: dict[int, RecalculationState] = {}
        self._task: asyncio.Task | None = None
        self._last_good_price: PriceBreakdown | None = None
        self._last_good_availability: AvailabilityVerdict | None = None

    # ------------------------------------------------------------------
    # Sequencing primitives
    # ------------------------------------------------------------------

    @property
    def state(self) -> RecalculationState:
        """State of the current request."""
        return self.state_of(self.sequence)

    def state_of(self, sequence: int) -> RecalculationState:
        return self._states.get(sequence, RecalculationState.IDLE)

    def _set_state(self, sequence: int, state: RecalculationState) -> None:
        self._states[sequence] = state
        for old in [seq for seq in self._states if seq <= self.sequence - STATE_HISTORY]:
            del self._states[old]

    def issue(self) -> int:
        """Register a selection change and return its sequence number."""
        self.sequence += 1
        self._set_state(self.sequence, RecalculationState.PENDING)
        return self.sequence

    def resolve(self, sequence: int, evaluation: Evaluation) -> bool:
        """
        Offer a finished result. Returns True if it was published.

        Results whose tag is not the current sequence are superseded and
        dropped without any callback.
        """
        if sequence != self.sequence:
            self._set_state(sequence, RecalculationState.SUPERSEDED)
            logger.debug("Discarding recalculation %d (current is %d)", sequence, self.sequence)
            return False

        self._set_state(sequence, RecalculationState.APPLIED)
        self.published = evaluation
        self.last_error = None
        if evaluation.price is not None and "price" not in evaluation.degraded:
            self._last_good_price = evaluation.price
        if evaluation.availability is not None and "availability" not in evaluation.degraded:
            self._last_good_availability = evaluation.availability
        if self._on_publish is not None:
            self._on_publish(evaluation)
        return True

    # ------------------------------------------------------------------
    # Async driver
    # ------------------------------------------------------------------

    def schedule(self, snapshot: SelectionState) -> int:
        """
        Issue a recalculation for ``snapshot`` and run it in the background.

        Must be called from inside a running event loop. An in-flight
        request for an older sequence is cancelled.
        """
        loop = asyncio.get_running_loop()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            self._set_state(self.sequence, RecalculationState.SUPERSEDED)
        sequence = self.issue()
        self._task = loop.create_task(self._run(sequence, snapshot))
        return sequence

    async def wait(self) -> Evaluation | None:
        """Wait until the latest scheduled request has settled."""
        while self._task is not None:
            task = self._task
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
            if task is self._task:
                break
        return self.published

    async def compute(self, sequence: int, snapshot: SelectionState) -> Evaluation:
        """
        Run the three derived computations for one snapshot.

        Validation is local and synchronous; price and availability run
        concurrently. A transient failure of either falls back to the last
        known good result with a warning.
        """
        violations = tuple(self._validator(snapshot))
        price, availability = await asyncio.gather(
            _call(self._pricer, snapshot),
            _call(self._availability, snapshot),
            return_exceptions=True,
        )

        warnings = []
        degraded = []
        if isinstance(price, TransientComputationFailure):
            logger.warning("Price recalculation %d failed, keeping last known price: %s", sequence, price)
            warnings.append("Price could not be refreshed and may be out of date.")
            degraded.append("price")
            price = self._last_good_price
        elif isinstance(price, BaseException):
            raise price
        if isinstance(availability, TransientComputationFailure):
            logger.warning("Stock recalculation %d failed, keeping last known stock: %s", sequence, availability)
            warnings.append("Stock could not be refreshed and may be out of date.")
            degraded.append("availability")
            availability = self._last_good_availability
        elif isinstance(availability, BaseException):
            raise availability

        return Evaluation(
            sequence=sequence,
            violations=violations,
            price=price,
            availability=availability,
            warnings=tuple(warnings),
            degraded=tuple(degraded),
        )

    async def _run(self, sequence: int, snapshot: SelectionState) -> None:
        try:
            if self.debounce:
                await asyncio.sleep(self.debounce)
            if sequence != self.sequence:
                self._set_state(sequence, RecalculationState.SUPERSEDED)
                return
            evaluation = await self.compute(sequence, snapshot)
        except asyncio.CancelledError:
            self._set_state(sequence, RecalculationState.SUPERSEDED)
            raise
        except Exception as exc:
            if sequence != self.sequence:
                self._set_state(sequence, RecalculationState.SUPERSEDED)
                return
            logger.exception("Recalculation %d failed", sequence)
            self._set_state(sequence, RecalculationState.FAILED)
            self.last_error = exc
            if self._on_error is not None:
                self._on_error(sequence, exc)
            return
        self.resolve(sequence, evaluation)
