"""Tests for the incremental reveal controller."""

import threading

import numpy as np
import pytest

from worldgen.config import RevealConfig
from worldgen.exceptions import ConfigurationError, InvalidStateError
from worldgen.reveal import (
    RevealController,
    RevealState,
    RevealWorker,
    reveal_async,
    run_reveal,
)


def run_to_end(controller: RevealController) -> int:
    """Step until the reveal stops; return the number of steps taken."""
    steps = 0
    while controller.is_active:
        controller.step()
        steps += 1
    return steps


class TestLifecycle:
    """Tests for state transitions."""

    def test_initial_state_idle(self) -> None:
        """A new controller is IDLE with nothing visited."""
        controller = RevealController(4, 4)
        assert controller.state is RevealState.IDLE
        assert controller.visited_count == 0
        assert controller.total_count == 16

    def test_start_marks_origin(self) -> None:
        """start() visits the origin and moves to RUNNING."""
        controller = RevealController(4, 4)
        controller.start((2, 2))
        assert controller.state is RevealState.RUNNING
        assert controller.visited_count == 1
        assert controller.is_visited(2, 2)
        assert controller.generated[2, 2]

    def test_default_origin_is_center(self) -> None:
        """Without an origin the reveal starts at the grid center."""
        controller = RevealController(10, 6)
        controller.start()
        assert controller.is_visited(5, 3)

    def test_start_twice_rejected(self) -> None:
        """start() is not re-entrant."""
        controller = RevealController(4, 4)
        controller.start((0, 0))
        with pytest.raises(InvalidStateError):
            controller.start((1, 1))

    def test_step_before_start_rejected(self) -> None:
        """step() in IDLE is a state error."""
        with pytest.raises(InvalidStateError):
            RevealController(4, 4).step()

    def test_step_after_completion_rejected(self) -> None:
        """step() after COMPLETED is a state error."""
        controller = RevealController(2, 2)
        controller.start((0, 0))
        run_to_end(controller)
        with pytest.raises(InvalidStateError):
            controller.step()

    @pytest.mark.parametrize("origin", [(-1, 0), (4, 0), (0, 4), (10, 10)])
    def test_origin_out_of_bounds(self, origin: tuple[int, int]) -> None:
        """Origins outside the grid are configuration errors."""
        with pytest.raises(ConfigurationError):
            RevealController(4, 4).start(origin)

    @pytest.mark.parametrize("width,height,batch", [(0, 4, 10), (4, -1, 10), (4, 4, 0)])
    def test_invalid_construction(self, width: int, height: int, batch: int) -> None:
        """Bad dimensions or batch sizes are configuration errors."""
        with pytest.raises(ConfigurationError):
            RevealController(width, height, batch_size=batch)

    def test_reset_returns_to_idle(self) -> None:
        """reset() after completion allows a fresh reveal."""
        controller = RevealController(3, 3)
        controller.start((0, 0))
        run_to_end(controller)
        controller.reset()
        assert controller.state is RevealState.IDLE
        assert controller.visited_count == 0
        assert not controller.generated.any()
        controller.start((1, 1))
        assert controller.state is RevealState.RUNNING

    def test_reset_while_running_rejected(self) -> None:
        """reset() is only valid once the reveal has stopped."""
        controller = RevealController(3, 3)
        with pytest.raises(InvalidStateError):
            controller.reset()
        controller.start((0, 0))
        with pytest.raises(InvalidStateError):
            controller.reset()

    def test_from_config(self) -> None:
        """from_config uses the configured batch size."""
        controller = RevealController.from_config(5, 5, RevealConfig(batch_size=7))
        assert controller.batch_size == 7


class TestTraversal:
    """Tests for breadth-first expansion."""

    def test_4x4_from_center(self) -> None:
        """A 4x4 grid from (2, 2) visits all 16 cells and completes."""
        controller = RevealController(4, 4)
        controller.start((2, 2))
        run_to_end(controller)
        assert controller.visited_count == 16
        assert controller.state is RevealState.COMPLETED
        assert controller.generated.all()

    @pytest.mark.parametrize(
        "width,height,origin",
        [(1, 1, (0, 0)), (7, 3, (0, 0)), (5, 9, (4, 8)), (20, 20, (13, 2))],
    )
    def test_visits_every_cell_once(
        self, width: int, height: int, origin: tuple[int, int]
    ) -> None:
        """Each cell is dequeued exactly once; steps equal cell count."""
        controller = RevealController(width, height)
        controller.start(origin)
        steps = run_to_end(controller)
        assert steps == width * height
        assert controller.visited_count == width * height
        assert controller.frontier_size == 0

    def test_breadth_first_order(self) -> None:
        """Cells are revealed in order of Manhattan distance from the origin."""
        width, height, origin = 9, 7, (4, 3)
        controller = RevealController(width, height)
        controller.start(origin)

        reveal_order = np.full((height, width), -1)
        reveal_order[origin[1], origin[0]] = 0
        step = 0
        while controller.is_active:
            controller.step()
            step += 1
            newly = controller.generated & (reveal_order < 0)
            reveal_order[newly] = step

        ys, xs = np.indices((height, width))
        distance = np.abs(xs - origin[0]) + np.abs(ys - origin[1])
        order = reveal_order.ravel()[np.argsort(distance.ravel(), kind="stable")]
        sorted_distance = np.sort(distance.ravel())
        # Farther rings are never revealed before nearer rings
        for d in range(1, sorted_distance.max()):
            assert order[sorted_distance == d].max() <= order[sorted_distance == d + 1].min()


class TestProgress:
    """Tests for batched progress notifications."""

    def test_batches_and_final_event(self) -> None:
        """Progress fires at each batch boundary and once on completion."""
        events: list[tuple[int, int]] = []
        controller = RevealController(
            10, 10, batch_size=30, on_progress=lambda v, t: events.append((v, t))
        )
        controller.start((5, 5))
        run_to_end(controller)

        assert events[-1] == (100, 100)
        batch_events = events[:-1]
        assert len(batch_events) == 3
        for i, (visited, total) in enumerate(batch_events, start=1):
            assert total == 100
            assert 30 * i <= visited < 30 * i + 4
        assert [v for v, _ in events] == sorted(v for v, _ in events)

    def test_small_grid_only_final_event(self) -> None:
        """A reveal smaller than one batch reports only completion."""
        events: list[tuple[int, int]] = []
        controller = RevealController(4, 4, on_progress=lambda v, t: events.append((v, t)))
        controller.start((2, 2))
        run_to_end(controller)
        assert events == [(16, 16)]

    def test_step_reports_batch_boundary(self) -> None:
        """step() returns True exactly when progress was reported."""
        events: list[int] = []
        controller = RevealController(
            6, 6, batch_size=10, on_progress=lambda v, t: events.append(v)
        )
        controller.start((0, 0))
        flagged = 0
        while controller.is_active:
            flagged += controller.step()
        assert flagged == len(events)


class TestCancellation:
    """Tests for cancellation."""

    def test_cancel_reads_as_cancelling(self) -> None:
        """After cancel() the state reads CANCELLING until a step observes it."""
        controller = RevealController(10, 10)
        controller.start((5, 5))
        controller.step()
        assert controller.cancel() is True
        assert controller.state is RevealState.CANCELLING

    def test_next_step_cancels_without_visiting(self) -> None:
        """The next step stops the reveal and visits nothing."""
        controller = RevealController(10, 10)
        controller.start((5, 5))
        for _ in range(5):
            controller.step()
        visited = controller.visited_count
        frontier = controller.frontier_size

        controller.cancel()
        assert controller.step() is False

        assert controller.state is RevealState.CANCELLED
        assert controller.visited_count == visited
        assert controller.frontier_size == frontier
        with pytest.raises(InvalidStateError):
            controller.step()

    def test_cancel_right_after_start(self) -> None:
        """Cancelling before any step leaves only the origin visited."""
        controller = RevealController(10, 10)
        controller.start((0, 0))
        controller.cancel()
        run_to_end(controller)
        assert controller.state is RevealState.CANCELLED
        assert controller.visited_count == 1

    def test_cancel_idle_rejected(self) -> None:
        """cancel() before start() is a state error."""
        with pytest.raises(InvalidStateError):
            RevealController(4, 4).cancel()

    def test_cancel_after_completion_ignored(self) -> None:
        """cancel() after completion is a no-op."""
        controller = RevealController(2, 2)
        controller.start((0, 0))
        run_to_end(controller)
        assert controller.cancel() is False
        assert controller.state is RevealState.COMPLETED

    def test_cancel_twice(self) -> None:
        """A second cancel() is ignored."""
        controller = RevealController(5, 5)
        controller.start((0, 0))
        assert controller.cancel() is True
        assert controller.cancel() is False

    def test_reset_after_cancel(self) -> None:
        """A cancelled reveal can be reset and run to completion."""
        controller = RevealController(5, 5)
        controller.start((0, 0))
        controller.cancel()
        controller.step()
        controller.reset()
        assert not controller.cancel_requested
        controller.start((2, 2))
        run_to_end(controller)
        assert controller.state is RevealState.COMPLETED
        assert controller.visited_count == 25

    def test_cancel_from_progress_callback(self) -> None:
        """Cancelling inside a progress callback stops at the next step."""
        controller = RevealController(30, 30, batch_size=50)
        controller.on_progress = lambda visited, total: controller.cancel()
        controller.start((15, 15))
        run_to_end(controller)
        assert controller.state is RevealState.CANCELLED
        assert 50 <= controller.visited_count < 54


class TestRunReveal:
    """Tests for the synchronous step loop."""

    def test_pauses_at_batch_boundaries(self) -> None:
        """The loop pauses once per batch, not after completion."""
        pauses: list[float] = []
        controller = RevealController(10, 10, batch_size=30)
        controller.start((0, 0))
        state = run_reveal(controller, pause_s=0.5, wait=pauses.append)
        assert state is RevealState.COMPLETED
        assert pauses == [0.5] * 3

    def test_cancel_during_pause(self) -> None:
        """A cancel issued during a pause ends the loop on the next step."""
        controller = RevealController(20, 20, batch_size=10)
        controller.start((10, 10))

        def wait(_: float) -> None:
            controller.cancel()

        state = run_reveal(controller, wait=wait)
        assert state is RevealState.CANCELLED
        assert controller.visited_count < 20


class TestRevealAsync:
    """Tests for the asyncio step loop."""

    @pytest.mark.asyncio
    async def test_runs_to_completion(self) -> None:
        """The async loop completes the reveal."""
        controller = RevealController(12, 12, batch_size=30)
        controller.start((6, 6))
        state = await reveal_async(controller, pause_s=0)
        assert state is RevealState.COMPLETED
        assert controller.visited_count == 144


class TestRevealWorker:
    """Tests for the background thread host."""

    def test_runs_to_completion(self) -> None:
        """The worker completes the reveal on its own thread."""
        threads: set[str] = set()
        controller = RevealController(
            30,
            30,
            batch_size=100,
            on_progress=lambda v, t: threads.add(threading.current_thread().name),
        )
        worker = RevealWorker(controller, pause_s=0)
        worker.start((0, 0))
        state = worker.join(timeout=10)
        assert state is RevealState.COMPLETED
        assert controller.visited_count == 900
        assert threads == {"reveal-worker"}
        assert worker.error is None

    def test_cancel_from_other_thread(self) -> None:
        """Cancelling from the caller's thread stops the worker promptly."""
        first_batch = threading.Event()
        controller = RevealController(
            200, 200, batch_size=50, on_progress=lambda v, t: first_batch.set()
        )
        worker = RevealWorker(controller, pause_s=5.0)
        worker.start()

        assert first_batch.wait(timeout=10)
        assert worker.cancel() is True
        state = worker.join(timeout=5)

        assert not worker.is_alive
        assert state is RevealState.CANCELLED
        assert controller.visited_count < controller.total_count

    def test_start_while_running_rejected(self) -> None:
        """A running worker cannot be started again."""
        started = threading.Event()
        controller = RevealController(
            200, 200, batch_size=10, on_progress=lambda v, t: started.set()
        )
        worker = RevealWorker(controller, pause_s=5.0)
        worker.start()
        try:
            assert started.wait(timeout=10)
            with pytest.raises(InvalidStateError):
                worker.start()
        finally:
            worker.cancel()
            worker.join(timeout=5)
