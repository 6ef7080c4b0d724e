"""Incremental, cancellable breadth-first reveal of a world grid.

The controller expands outward from an origin one cell per step, marking
cells as generated. Progress is reported at batch boundaries so a
presentation layer can redraw, and the hosting loop pauses briefly at each
boundary so cancellation and redraws are not starved.
"""

import asyncio
import threading
import time
from collections import deque
from enum import Enum, auto
from typing import Callable

import numpy as np
import structlog
from numpy.typing import NDArray

from .config import RevealConfig
from .exceptions import ConfigurationError, InvalidStateError
from .types import Coord

logger = structlog.get_logger()

# Called with (visited_count, total_count)
ProgressCallback = Callable[[int, int], None]

# Left, right, up, down
NEIGHBOR_OFFSETS: tuple[Coord, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


class RevealState(Enum):
    """Reveal lifecycle states."""

    IDLE = auto()  # Not started, or reset
    RUNNING = auto()  # Frontier being expanded
    CANCELLING = auto()  # Cancel requested, not yet observed by a step
    CANCELLED = auto()  # Stopped before the frontier emptied
    COMPLETED = auto()  # Every reachable cell visited


class RevealController:
    """Breadth-first reveal over a width x height grid.

    Frontier and visited set belong to the thread calling step(). The
    cancellation token is the only state shared with other threads and has
    its own lock.

    Usage:
        controller = RevealController(64, 64, on_progress=redraw)
        controller.start((32, 32))
        while controller.state is RevealState.RUNNING:
            controller.step()
    """

    def __init__(
        self,
        width: int,
        height: int,
        batch_size: int = 200,
        on_progress: ProgressCallback | None = None,
    ):
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {width}x{height}"
            )
        if batch_size <= 0:
            raise ConfigurationError(f"Batch size must be positive, got {batch_size}")

        self.width = width
        self.height = height
        self.batch_size = batch_size
        self.on_progress = on_progress

        self._state = RevealState.IDLE
        self._frontier: deque[Coord] = deque()
        self._visited: set[Coord] = set()
        self._generated = np.zeros((height, width), dtype=bool)
        self._next_report = batch_size

        self._cancel_lock = threading.Lock()
        self._cancel_requested = False

    @classmethod
    def from_config(
        cls,
        width: int,
        height: int,
        config: RevealConfig,
        on_progress: ProgressCallback | None = None,
    ) -> "RevealController":
        return cls(width, height, batch_size=config.batch_size, on_progress=on_progress)

    @property
    def state(self) -> RevealState:
        """Current state; RUNNING reads as CANCELLING once cancel() was called."""
        if self._state is RevealState.RUNNING and self.cancel_requested:
            return RevealState.CANCELLING
        return self._state

    @property
    def cancel_requested(self) -> bool:
        with self._cancel_lock:
            return self._cancel_requested

    @property
    def is_active(self) -> bool:
        """Whether steps are still expected (RUNNING or CANCELLING)."""
        return self._state is RevealState.RUNNING

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    @property
    def total_count(self) -> int:
        return self.width * self.height

    @property
    def frontier_size(self) -> int:
        return len(self._frontier)

    @property
    def generated(self) -> NDArray[np.bool_]:
        """Copy of the generated-cell mask, shape (height, width)."""
        return self._generated.copy()

    def is_visited(self, x: int, y: int) -> bool:
        return (x, y) in self._visited

    def default_origin(self) -> Coord:
        """Grid center."""
        return self.width // 2, self.height // 2

    def start(self, origin: Coord | None = None) -> None:
        """Begin a reveal at origin (default: grid center).

        Raises:
            InvalidStateError: If not IDLE.
            ConfigurationError: If origin lies outside the grid.
        """
        if self._state is not RevealState.IDLE:
            raise InvalidStateError(f"Cannot start reveal from {self._state.name}")

        origin = origin if origin is not None else self.default_origin()
        if not self._in_bounds(*origin):
            raise ConfigurationError(
                f"Origin {origin} outside {self.width}x{self.height} grid"
            )

        self._frontier.append(origin)
        self._mark_visited(origin)
        self._state = RevealState.RUNNING

        logger.info(
            "reveal_started",
            origin=origin,
            width=self.width,
            height=self.height,
            batch_size=self.batch_size,
        )

    def step(self) -> bool:
        """Process one frontier cell.

        Observes a pending cancellation before dequeuing anything. Neighbors
        are marked visited when enqueued, so each cell is enqueued at most
        once.

        Returns:
            True if progress was reported during this step (a batch
            boundary or completion).

        Raises:
            InvalidStateError: If the reveal is not RUNNING or CANCELLING.
        """
        if self._state is not RevealState.RUNNING:
            raise InvalidStateError(f"Cannot step reveal in {self._state.name}")

        if self.cancel_requested:
            self._state = RevealState.CANCELLED
            logger.info(
                "reveal_cancelled",
                visited=self.visited_count,
                total=self.total_count,
                frontier=len(self._frontier),
            )
            return False

        x, y = self._frontier.popleft()
        for dx, dy in NEIGHBOR_OFFSETS:
            neighbor = (x + dx, y + dy)
            if self._in_bounds(*neighbor) and neighbor not in self._visited:
                self._mark_visited(neighbor)
                self._frontier.append(neighbor)

        if not self._frontier:
            self._state = RevealState.COMPLETED
            self._emit_progress()
            logger.info("reveal_completed", visited=self.visited_count)
            return True

        if self.visited_count >= self._next_report:
            # A step can add up to 4 cells, so skip every threshold it crossed
            while self._next_report <= self.visited_count:
                self._next_report += self.batch_size
            self._emit_progress()
            return True

        return False

    def cancel(self) -> bool:
        """Request cancellation; the next step() stops the reveal.

        Safe to call from any thread.

        Returns:
            True if the request was registered, False if the reveal had
            already been cancelled or finished.

        Raises:
            InvalidStateError: If the reveal was never started.
        """
        if self._state is RevealState.IDLE:
            raise InvalidStateError("Cannot cancel a reveal that has not started")

        with self._cancel_lock:
            if self._state is not RevealState.RUNNING or self._cancel_requested:
                logger.debug("reveal_cancel_ignored", state=self._state.name)
                return False
            self._cancel_requested = True

        logger.info("reveal_cancel_requested", visited=self.visited_count)
        return True

    def reset(self) -> None:
        """Return a finished or cancelled reveal to IDLE.

        Raises:
            InvalidStateError: If the reveal is IDLE, RUNNING or CANCELLING.
        """
        if self._state not in (RevealState.COMPLETED, RevealState.CANCELLED):
            raise InvalidStateError(f"Cannot reset reveal from {self.state.name}")

        self._frontier.clear()
        self._visited.clear()
        self._generated[:] = False
        self._next_report = self.batch_size
        with self._cancel_lock:
            self._cancel_requested = False
        self._state = RevealState.IDLE

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _mark_visited(self, coord: Coord) -> None:
        self._visited.add(coord)
        x, y = coord
        self._generated[y, x] = True

    def _emit_progress(self) -> None:
        logger.debug(
            "reveal_progress", visited=self.visited_count, total=self.total_count
        )
        if self.on_progress:
            self.on_progress(self.visited_count, self.total_count)


def run_reveal(
    controller: RevealController,
    pause_s: float = 0.03,
    wait: Callable[[float], object] = time.sleep,
) -> RevealState:
    """Step a started reveal until it completes or is cancelled.

    Pauses for pause_s at every batch boundary.

    Args:
        controller: A controller that has been started.
        pause_s: Pause length at batch boundaries, in seconds.
        wait: Function used to pause; receives pause_s.

    Returns:
        The final state (COMPLETED or CANCELLED).
    """
    while controller.is_active:
        if controller.step() and controller.is_active:
            wait(pause_s)
    return controller.state


async def reveal_async(
    controller: RevealController,
    pause_s: float = 0.03,
) -> RevealState:
    """Asyncio variant of run_reveal, yielding to the event loop at batch boundaries."""
    while controller.is_active:
        if controller.step() and controller.is_active:
            await asyncio.sleep(pause_s)
    return controller.state


class RevealWorker:
    """Runs a reveal on a background thread.

    cancel() may be called from any thread; it also wakes the worker from
    its batch pause so the cancellation is observed promptly.

    Usage:
        worker = RevealWorker(controller)
        worker.start()
        ...
        worker.cancel()
        worker.join()
    """

    def __init__(self, controller: RevealController, pause_s: float = 0.03):
        self.controller = controller
        self.pause_s = pause_s
        self._wake = threading.Event()
        self._thread: threading.Thread | None = None
        self._error: BaseException | None = None

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def error(self) -> BaseException | None:
        """Exception raised on the worker thread, if any."""
        return self._error

    def start(self, origin: Coord | None = None) -> None:
        """Start the controller at origin and step it on a new thread.

        Raises:
            InvalidStateError: If a worker thread is already running or the
                controller is not IDLE.
        """
        if self.is_alive:
            raise InvalidStateError("Reveal worker is already running")

        self.controller.start(origin)
        self._wake.clear()
        self._error = None
        self._thread = threading.Thread(
            target=self._run, name="reveal-worker", daemon=True
        )
        self._thread.start()

    def cancel(self) -> bool:
        """Request cancellation of the running reveal."""
        requested = self.controller.cancel()
        self._wake.set()
        return requested

    def join(self, timeout: float | None = None) -> RevealState:
        """Wait for the worker thread to finish.

        Returns:
            The controller state after waiting.
        """
        if self._thread is not None:
            self._thread.join(timeout)
        return self.controller.state

    def _run(self) -> None:
        try:
            run_reveal(self.controller, self.pause_s, wait=self._wake.wait)
        except Exception as e:
            self._error = e
            logger.exception("reveal_worker_failed")
            raise
