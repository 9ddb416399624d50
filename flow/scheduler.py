"""
flow/scheduler.py - Frame Scheduler

Drives one tick per display frame through a host frame primitive. The
scheduler owns at most one pending frame request and cancels it on stop(),
so no callback fires against a torn-down view.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from .cycle import simulate_tick
from .ledger import record
from .types_config import FlowConfig
from .types_state import FlowState

FrameCallback = Callable[[float], None]


class FrameHost(ABC):
    """Host animation primitive (requestAnimationFrame / cancelAnimationFrame)."""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> int:
        """Schedule callback for the next frame; returns a cancel handle."""
        pass

    @abstractmethod
    def cancel_frame(self, handle: int) -> None:
        """Drop a pending request. Unknown handles are ignored."""
        pass


class ManualFrameHost(FrameHost):
    """Deterministic in-process host: frames fire only when advance() is called."""

    def __init__(self):
        self._pending: Dict[int, FrameCallback] = {}
        self._next_handle = 1

    def request_frame(self, callback: FrameCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def advance(self, frame_time: float) -> int:
        """
        Fire every callback requested before this frame.

        Requests made while firing are deferred to the next frame.

        Returns:
            int: Number of callbacks fired
        """
        due = self._pending
        self._pending = {}
        for callback in due.values():
            callback(frame_time)
        return len(due)


class FrameScheduler:
    """
    Per-frame driver for a FlowState.

    While started, every frame runs one tick and re-arms unconditionally;
    mode activation gates spawning, not scheduling.
    """

    def __init__(self, state: FlowState, config: FlowConfig, host: FrameHost,
                 on_tick: Optional[Callable[[FlowState, dict], None]] = None):
        self.state = state
        self.config = config
        self.host = host
        self.on_tick = on_tick
        self._handle: Optional[int] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Arm the first frame. No-op if already started."""
        if self._running:
            return
        self._running = True
        self._handle = self.host.request_frame(self._on_frame)
        record(self.state, "scheduler_started", {"frame_time": self.state.frame_time})

    def stop(self) -> None:
        """Cancel the pending frame and suspend further ticks."""
        if self._handle is not None:
            self.host.cancel_frame(self._handle)
            self._handle = None
        if self._running:
            self._running = False
            record(self.state, "scheduler_stopped", {"ticks_run": self.state.tick})

    def tick(self, frame_time: float) -> dict:
        """Run one synchronous tick at the given frame time."""
        report = simulate_tick(self.state, self.config, frame_time)
        if self.on_tick is not None:
            self.on_tick(self.state, report)
        return report

    def _on_frame(self, frame_time: float) -> None:
        self._handle = None
        if not self._running:
            return
        try:
            self.tick(frame_time)
        except Exception:
            self.stop()
            raise
        if self._running:
            self._handle = self.host.request_frame(self._on_frame)

    def __enter__(self) -> "FrameScheduler":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
