"""
Roulette-style random selection over a candidate list.

A session runs in two phases: a fixed number of reveal ticks, each showing an
independently drawn candidate, followed by one fresh draw that decides the
winner. The winner is never derived from what was last displayed.

Timing is delegated to a scheduler so the session itself never blocks.
"""
import logging
import random
import threading
from typing import Callable, List, Optional, Protocol, Sequence

from domain.models import PickPhase, Place
from services.errors import NoCandidatesError
from settings import settings

logger = logging.getLogger(__name__)

# A repeating callback returns False to stop being called.
TimerCallback = Callable[[], bool]


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_every(self, interval_sec: float, callback: TimerCallback) -> TimerHandle:
        ...


class _ImmediateHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ImmediateScheduler:
    """Fire callbacks back-to-back on the calling thread, ignoring the interval.

    Runs until the callback returns False; callers must guarantee it does.
    """

    def call_every(self, interval_sec: float, callback: TimerCallback) -> TimerHandle:
        handle = _ImmediateHandle()
        while not handle.cancelled:
            if callback() is False:
                break
        return handle


class _ThreadHandle:
    def __init__(self, stop: threading.Event, thread: threading.Thread):
        self._stop = stop
        self.thread = thread

    def cancel(self) -> None:
        self._stop.set()


class ThreadingScheduler:
    """Call a callback at a fixed cadence from a daemon thread."""

    def call_every(self, interval_sec: float, callback: TimerCallback) -> TimerHandle:
        stop = threading.Event()

        def _run() -> None:
            while not stop.wait(interval_sec):
                try:
                    keep_going = callback()
                except Exception:
                    logger.exception("ThreadingScheduler: callback failed; stopping timer")
                    return
                if keep_going is False:
                    return

        thread = threading.Thread(target=_run, name="selection-ticker", daemon=True)
        handle = _ThreadHandle(stop, thread)
        thread.start()
        return handle


class SelectionSession:
    """
    Picks one place from a fixed candidate list.

    Phases: IDLE -> PICKING -> RESULT, RESULT -> IDLE on reset, and any
    phase -> IDLE when the candidates are replaced. At most one ticking
    sequence is active at a time; starting again or resetting cancels the
    previous one, and late callbacks from it are ignored.
    """

    def __init__(
        self,
        candidates: Sequence[Place],
        rng: Optional[random.Random] = None,
        ticks: Optional[int] = None,
        interval_ms: Optional[int] = None,
        on_change: Optional[Callable[["SelectionSession"], None]] = None,
    ):
        self._candidates = tuple(candidates)
        self._rng = rng or random.SystemRandom()
        self.ticks = settings.PICK_TICKS if ticks is None else ticks
        self.interval_ms = settings.PICK_INTERVAL_MS if interval_ms is None else interval_ms
        self.on_change = on_change

        self.phase = PickPhase.IDLE
        self.displayed: Optional[Place] = None
        self.winner: Optional[Place] = None
        self.revealed: List[Place] = []

        self._ticks_done = 0
        self._run_id = 0
        self._handle: Optional[TimerHandle] = None
        self._lock = threading.RLock()

    @property
    def candidates(self) -> tuple:
        return self._candidates

    @property
    def displayed_name(self) -> Optional[str]:
        return self.displayed.name if self.displayed else None

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def _draw(self) -> Place:
        return self._candidates[self._rng.randrange(len(self._candidates))]

    def _cancel_ticking(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def start(self, scheduler: Scheduler) -> None:
        """Begin a new picking run, cancelling any run still in flight."""
        if not self._candidates:
            raise NoCandidatesError("cannot pick from an empty candidate list")
        with self._lock:
            self._cancel_ticking()
            self._run_id += 1
            run_id = self._run_id
            self.phase = PickPhase.PICKING
            self.displayed = None
            self.winner = None
            self.revealed = []
            self._ticks_done = 0
            logger.debug(
                "SelectionSession.start: run=%d candidates=%d ticks=%d interval_ms=%d",
                run_id,
                len(self._candidates),
                self.ticks,
                self.interval_ms,
            )
            self._notify()
            if self.ticks <= 0:
                self.commit()
                return

        handle = scheduler.call_every(self.interval_ms / 1000.0, lambda: self._on_timer(run_id))
        with self._lock:
            # The run may already be over (synchronous schedulers) or superseded.
            if run_id == self._run_id and self.phase is PickPhase.PICKING:
                self._handle = handle
            else:
                handle.cancel()

    def _on_timer(self, run_id: int) -> bool:
        with self._lock:
            if run_id != self._run_id or self.phase is not PickPhase.PICKING:
                return False
            self.tick()
            if self._ticks_done >= self.ticks:
                self.commit()
                return False
            return True

    def tick(self) -> Place:
        """Show one independently drawn candidate. Never decides the winner."""
        with self._lock:
            if self.phase is not PickPhase.PICKING:
                raise RuntimeError(f"tick() called while {self.phase.value}")
            place = self._draw()
            self.displayed = place
            self.revealed.append(place)
            self._ticks_done += 1
            self._notify()
            return place

    def commit(self) -> Place:
        """Draw the winner afresh and move to RESULT."""
        with self._lock:
            if self.phase is not PickPhase.PICKING:
                raise RuntimeError(f"commit() called while {self.phase.value}")
            self._cancel_ticking()
            self.winner = self._draw()
            self.phase = PickPhase.RESULT
            logger.debug("SelectionSession.commit: winner=%s after %d ticks", self.winner.id, self._ticks_done)
            self._notify()
            return self.winner

    def reset(self) -> None:
        """Return to IDLE, keeping the candidates so picking can run again."""
        with self._lock:
            self._cancel_ticking()
            self._run_id += 1
            self.phase = PickPhase.IDLE
            self.displayed = None
            self.winner = None
            self.revealed = []
            self._ticks_done = 0
            self._notify()

    def replace_candidates(self, candidates: Sequence[Place]) -> None:
        """Swap in a new candidate list (a new search); invalidates any run."""
        with self._lock:
            self._candidates = tuple(candidates)
            self.reset()
