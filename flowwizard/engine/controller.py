"""StateMachineController - runs a queue of step functions to completion."""

import copy
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional

from .controls import ABORT_SIGNALS, ControlSignal

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """Outcome of running one step function."""

    next_state: Dict[str, Any]
    next_steps: List['StepFunction'] = field(default_factory=list)
    control_signal: Optional[ControlSignal] = None


StepFunction = Callable[[Dict[str, Any]], StepResult]
Branch = List[StepFunction]


class ControllerStatus(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    COMPLETED = 'completed'
    ABORTED = 'aborted'


@dataclass
class _HistoryEntry:
    step: StepFunction
    state: Dict[str, Any]
    added: Branch


class StateMachineController:
    """
    Executes step functions one at a time against a shared state.

    Key responsibilities:
    - Keep the pending queue, with newly revealed steps pushed to the front
    - Record executed steps so BACK can rewind state and re-ask
    - Interpret control signals (exit, back, retry)
    - Expose step counters for "step X of Y" displays
    """

    def __init__(self, init_state: Optional[Dict[str, Any]] = None):
        """
        Initialize the controller.

        Args:
            init_state: Starting state (deep copied, never mutated)
        """
        self.state: Dict[str, Any] = copy.deepcopy(init_state) if init_state else {}
        self.status = ControllerStatus.IDLE
        self._pending: Deque[StepFunction] = deque()
        self._history: List[_HistoryEntry] = []
        self._current: Optional[StepFunction] = None

    @property
    def current_step(self) -> int:
        return len(self._history) + 1

    @property
    def total_steps(self) -> int:
        """Executed plus pending steps, counting the step in flight; no +1 between steps."""
        in_flight = 1 if self._current is not None else 0
        return len(self._history) + len(self._pending) + in_flight

    def add_step(self, step: StepFunction) -> None:
        """Append a step to the end of the pending queue."""
        self._pending.append(step)

    def add_branch(self, steps: Iterable[StepFunction]) -> None:
        """Push steps to the front of the queue, keeping their order."""
        self._pending.extendleft(reversed(list(steps)))

    def contains_step(self, step: StepFunction) -> bool:
        """Check if a step is running, pending or already executed."""
        if step is self._current:
            return True
        if any(pending is step for pending in self._pending):
            return True
        return any(entry.step is step for entry in self._history)

    def run(self) -> Optional[Dict[str, Any]]:
        """
        Run pending steps until the queue is empty or the flow is aborted.

        Returns:
            The accumulated state, or None if the flow was aborted
        """
        self.status = ControllerStatus.RUNNING
        logger.debug("Controller running with %d pending steps", len(self._pending))

        while self._pending:
            step = self._pending.popleft()
            snapshot = copy.deepcopy(self.state)
            self._current = step
            try:
                result = step(self.state)
            except Exception:
                self.status = ControllerStatus.ABORTED
                raise
            finally:
                self._current = None

            signal = result.control_signal

            if signal in ABORT_SIGNALS:
                self._abort(signal)
                return None

            if signal is ControlSignal.BACK:
                if not self._rollback(step):
                    self._abort(signal)
                    return None
                continue

            if signal is ControlSignal.RETRY:
                logger.debug("Retrying step %d", self.current_step)
                self._pending.appendleft(step)
                continue

            self.state = result.next_state
            # Keep only steps not already scheduled or executed
            added: Branch = []
            for next_step in result.next_steps:
                if not self.contains_step(next_step) and all(s is not next_step for s in added):
                    added.append(next_step)
            self._history.append(_HistoryEntry(step=step, state=snapshot, added=added))
            self.add_branch(added)

        self.status = ControllerStatus.COMPLETED
        logger.debug("Controller completed after %d steps", len(self._history))
        return self.state

    def _abort(self, signal: ControlSignal) -> None:
        logger.debug("Flow aborted by %s at step %d", signal.value, self.current_step)
        self._pending.clear()
        self.status = ControllerStatus.ABORTED

    def _rollback(self, step: StepFunction) -> bool:
        """
        Rewind to the previously executed step.

        The current step goes back on the queue, then the last history entry
        is undone: steps it revealed are unscheduled, the state it saw is
        restored and its step is queued first.

        Returns:
            False if there is no previous step to go back to
        """
        if not self._history:
            return False

        self._pending.appendleft(step)
        entry = self._history.pop()
        for added in entry.added:
            self._pending = deque(s for s in self._pending if s is not added)
        self.state = entry.state
        self._pending.appendleft(entry.step)
        logger.debug("Went back to step %d", self.current_step)
        return True
