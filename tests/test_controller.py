"""Tests for StateMachineController - queue execution and navigation."""

import pytest

from flowwizard.engine.controller import ControllerStatus, StateMachineController, StepResult
from flowwizard.engine.controls import ControlSignal


def make_step(name, log, key=None, value=None, signals=None, next_steps=None):
    """Build a step that records its name and optionally writes one key."""
    signals = list(signals or [])

    def step(state):
        log.append(name)
        signal = signals.pop(0) if signals else None
        if signal is None and key is not None:
            state[key] = value
        return StepResult(
            next_state=state,
            next_steps=list(next_steps or []),
            control_signal=signal,
        )

    step.__name__ = name
    return step


class TestRunOrder:
    """Steps run in queue order, newly revealed steps first."""

    def test_runs_all_steps_and_returns_state(self):
        """Controller runs queued steps and returns the accumulated state."""
        log = []
        controller = StateMachineController({'seed': 1})
        controller.add_step(make_step('a', log, 'a', 1))
        controller.add_step(make_step('b', log, 'b', 2))

        result = controller.run()

        assert log == ['a', 'b']
        assert result == {'seed': 1, 'a': 1, 'b': 2}
        assert controller.status is ControllerStatus.COMPLETED

    def test_init_state_is_not_mutated(self):
        """Controller works on a copy of the initial state."""
        init_state = {'nested': {'x': 1}}
        controller = StateMachineController(init_state)
        controller.add_step(make_step('a', [], 'a', 1))

        controller.run()

        assert init_state == {'nested': {'x': 1}}

    def test_next_steps_run_before_queued_siblings(self):
        """Steps returned by a step are pushed to the front of the queue."""
        log = []
        child_1 = make_step('child_1', log)
        child_2 = make_step('child_2', log)
        controller = StateMachineController()
        controller.add_step(make_step('a', log, next_steps=[child_1, child_2]))
        controller.add_step(make_step('b', log))

        controller.run()

        assert log == ['a', 'child_1', 'child_2', 'b']

    def test_contained_next_steps_are_not_scheduled_twice(self):
        """A step already pending or executed is not queued again."""
        log = []
        b = make_step('b', log)
        controller = StateMachineController()
        a = make_step('a', log, next_steps=[b])
        controller.add_step(a)
        controller.add_step(b)

        controller.run()

        assert log == ['a', 'b']

    def test_add_branch_keeps_order_at_front(self):
        """add_branch pushes steps before the existing queue, in order."""
        log = []
        controller = StateMachineController()
        controller.add_step(make_step('c', log))
        controller.add_branch([make_step('a', log), make_step('b', log)])

        controller.run()

        assert log == ['a', 'b', 'c']


class TestControlSignals:
    """Exit, back and retry handling."""

    def test_exit_aborts_and_returns_none(self):
        """EXIT discards the queue and run() returns None."""
        log = []
        controller = StateMachineController()
        controller.add_step(make_step('a', log, 'a', 1))
        controller.add_step(make_step('b', log, signals=[ControlSignal.EXIT]))
        controller.add_step(make_step('c', log))

        assert controller.run() is None
        assert log == ['a', 'b']
        assert controller.status is ControllerStatus.ABORTED
        assert controller.total_steps == 1

    def test_force_exit_aborts(self):
        """FORCE_EXIT is handled like EXIT by the controller."""
        controller = StateMachineController()
        controller.add_step(make_step('a', [], signals=[ControlSignal.FORCE_EXIT]))

        assert controller.run() is None
        assert controller.status is ControllerStatus.ABORTED

    def test_back_reruns_previous_step_with_restored_state(self):
        """BACK re-asks the previous step and drops its earlier answer."""
        log = []
        answers = iter(['first', 'second'])

        def a(state):
            log.append('a')
            state['a'] = next(answers)
            return StepResult(next_state=state)

        controller = StateMachineController()
        controller.add_step(a)
        controller.add_step(make_step('b', log, 'b', 'done', signals=[ControlSignal.BACK]))

        result = controller.run()

        assert log == ['a', 'b', 'a', 'b']
        assert result == {'a': 'second', 'b': 'done'}

    def test_back_state_has_no_residue(self):
        """State seen after BACK is the snapshot taken before the rewound step."""
        seen = []
        attempts = iter([{'x': 1, 'extra': True}, {'x': 2}])

        def a(state):
            state.update(next(attempts))
            return StepResult(next_state=state)

        def b(state):
            seen.append(dict(state))
            signal = ControlSignal.BACK if len(seen) == 1 else None
            return StepResult(next_state=state, control_signal=signal)

        controller = StateMachineController()
        controller.add_step(a)
        controller.add_step(b)

        assert controller.run() == {'x': 2}
        assert seen == [{'x': 1, 'extra': True}, {'x': 2}]

    def test_back_unschedules_steps_added_by_rewound_step(self):
        """Steps revealed by the rewound step are removed until it runs again."""
        log = []
        signals = iter([ControlSignal.BACK])

        def revealed(state):
            log.append('revealed')
            return StepResult(next_state=state, control_signal=next(signals, None))

        # a reveals a step on its first run only
        reveal = iter([[revealed], []])

        def a(state):
            log.append('a')
            return StepResult(next_state=state, next_steps=next(reveal))

        controller = StateMachineController()
        controller.add_step(a)
        controller.add_step(make_step('b', log))

        controller.run()

        assert log == ['a', 'revealed', 'a', 'b']

    def test_back_at_first_step_aborts(self):
        """BACK with no history behaves like EXIT."""
        controller = StateMachineController()
        controller.add_step(make_step('a', [], signals=[ControlSignal.BACK]))

        assert controller.run() is None
        assert controller.status is ControllerStatus.ABORTED

    def test_step_error_marks_flow_aborted(self):
        """An exception from a step propagates and leaves the flow aborted."""
        def broken(state):
            raise KeyError('boom')

        controller = StateMachineController()
        controller.add_step(broken)

        with pytest.raises(KeyError):
            controller.run()

        assert controller.status is ControllerStatus.ABORTED
        assert controller.total_steps == 0

    def test_retry_reruns_same_step(self):
        """RETRY runs the same step again without rewinding."""
        log = []
        controller = StateMachineController()
        controller.add_step(make_step('a', log, 'a', 1))
        controller.add_step(make_step('b', log, 'b', 2, signals=[ControlSignal.RETRY]))

        result = controller.run()

        assert log == ['a', 'b', 'b']
        assert result == {'a': 1, 'b': 2}


class TestCounters:
    """currentStep / totalSteps bookkeeping."""

    def test_counters_observed_inside_steps(self):
        """Each step sees its own position and the current total."""
        observed = []
        controller = StateMachineController()

        def observe(state):
            observed.append((controller.current_step, controller.total_steps))
            return StepResult(next_state=state)

        def reveal(state):
            observed.append((controller.current_step, controller.total_steps))
            return StepResult(next_state=state, next_steps=[observe])

        controller.add_step(reveal)
        controller.add_step(observe_copy(observe))

        controller.run()

        # reveal: 1 of 2; revealed step: 2 of 3; last queued step: 3 of 3
        assert observed == [(1, 2), (2, 3), (3, 3)]

    def test_total_after_completion_counts_executed_steps(self):
        """Between steps no in-flight step is counted."""
        controller = StateMachineController()
        controller.add_step(make_step('a', []))
        controller.add_step(make_step('b', []))

        assert controller.total_steps == 2
        controller.run()

        assert controller.total_steps == 2
        assert controller.current_step == 3

    def test_contains_step(self):
        """contains_step covers pending, running and executed steps."""
        controller = StateMachineController()
        checks = []

        def a(state):
            checks.append(controller.contains_step(a))
            return StepResult(next_state=state)

        def never_added(state):
            return StepResult(next_state=state)

        controller.add_step(a)
        assert controller.contains_step(a)
        assert not controller.contains_step(never_added)

        controller.run()

        assert checks == [True]
        assert controller.contains_step(a)


def observe_copy(step):
    """Distinct function object with the same behaviour."""
    def wrapper(state):
        return step(state)
    return wrapper
