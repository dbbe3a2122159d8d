"""Wizard - drives a dynamic sequence of prompts into one state object."""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set, Tuple

from .controller import Branch, StateMachineController, StepFunction, StepResult
from .controls import (
    ABORT_SIGNALS,
    WIZARD_BACK,
    ControlSignal,
    is_valid_response,
    is_wizard_control,
    should_dispose,
)
from .exceptions import WizardRunningError
from .form import FormBody, PrompterProvider, StateWithCache, WizardForm
from .prompter import Prompter, PrompterConfiguration, StepCache, StepDisplay, StepEstimator

logger = logging.getLogger(__name__)


@dataclass
class WizardOptions:
    """
    Construction options for a Wizard.

    Attributes:
        init_form: Form with bound prompters (an empty form if omitted)
        init_state: Starting state; properties already set are not asked
        exit_prompter: Builds a yes/no prompter asked before exiting
        implicit_state: Answers used to pre-select prompts, as if the user
            had picked them before
        parent_estimator: Estimator of the enclosing wizard when nested
    """

    init_form: Optional[WizardForm] = None
    init_state: Optional[Dict[str, Any]] = None
    exit_prompter: Optional[Callable[[Dict[str, Any]], Prompter]] = None
    implicit_state: Optional[Dict[str, Any]] = None
    parent_estimator: Optional[Callable[[Dict[str, Any]], int]] = None


class Wizard:
    """
    Runs the prompters bound in a WizardForm, one property per step.

    Key responsibilities:
    - Bind one step function per form property
    - Resolve which properties become reachable after each answer
    - Keep per-property caches and the step offset for nested flows
    - Apply form defaults to the final state
    """

    def __init__(self, options: Optional[WizardOptions] = None):
        self.options = options or WizardOptions()
        self._form = self.options.init_form or WizardForm()
        self._controller = StateMachineController(self.options.init_state)
        self._bound_steps: Dict[str, StepFunction] = {}
        self._caches: Dict[str, StepCache] = {}
        self._step_offset: Tuple[int, int] = (0, 0)
        self._running = False
        self._exit_step: Optional[StepFunction] = None
        if self.options.exit_prompter is not None:
            self._exit_step = self._create_exit_step(self.options.exit_prompter)

    @property
    def step_offset(self) -> Tuple[int, int]:
        return self._step_offset

    @step_offset.setter
    def step_offset(self, offset: Tuple[int, int]) -> None:
        """Offset added to both step counters when part of a larger flow."""
        self._step_offset = (offset[0], offset[1])

    @property
    def current_step(self) -> int:
        return self._step_offset[0] + self._controller.current_step

    @property
    def total_steps(self) -> int:
        return self._step_offset[1] + self._controller.total_steps

    @property
    def form(self) -> FormBody:
        return self._form.body

    @property
    def bound_form(self) -> WizardForm:
        """The internal form, which can be applied to other wizards."""
        return self._form

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cache(self) -> Dict[str, StepCache]:
        """Per-property step caches. Raises while the wizard is running."""
        if self._running:
            raise WizardRunningError("Cannot retrieve cache while wizard is running.")
        return self._caches

    @cache.setter
    def cache(self, cache: Dict[str, StepCache]) -> None:
        if self._running:
            raise WizardRunningError("Cannot set cache while wizard is running.")
        self._caches = cache

    @property
    def initial_state(self) -> Dict[str, Any]:
        return copy.deepcopy(self.options.init_state or {})

    def run(self) -> Optional[Dict[str, Any]]:
        """
        Ask every reachable property until the flow completes or exits.

        Returns:
            Final state with defaults applied, or None if the user exited
        """
        self._running = True
        # Each run starts from the initial state; caches carry over
        self._controller = StateMachineController(self.options.init_state)
        try:
            self._assign_steps()
            self._controller.add_branch(self.resolve_next_steps(self._controller.state))
            output_state = self._controller.run()
        finally:
            self._running = False

        if output_state is None:
            logger.debug("Wizard exited before completion")
            return None
        return self._form.apply_defaults(output_state, self._get_assigned())

    def resolve_next_steps(self, state: Dict[str, Any], assigned: Optional[Set[str]] = None) -> Branch:
        """
        Compute the steps that become runnable for the given state.

        Properties are visited in form order. Each property added to the
        branch counts as assigned for the properties after it, so a property
        depending on an earlier one can join the same branch.

        Args:
            state: State to evaluate visibility against
            assigned: Already assigned properties (defaults to every property
                whose step is running, pending or executed)

        Returns:
            Newly reachable steps, in form order
        """
        if assigned is None:
            assigned = self._get_assigned()
        currently_assigned = set(assigned)
        next_steps: Branch = []

        for prop, step in self._bound_steps.items():
            if prop in currently_assigned or self._controller.contains_step(step):
                continue
            if self._form.can_show_property(prop, state, currently_assigned):
                next_steps.append(step)
                currently_assigned.add(prop)

        return next_steps

    def _assign_steps(self) -> None:
        for prop in self._form.properties:
            provider = self._form.get_prompter_provider(prop)
            if provider is None or prop in self._bound_steps:
                continue
            self._caches.setdefault(prop, StepCache())
            self._bound_steps[prop] = self._create_bound_step(prop, provider)

    def _get_assigned(self) -> Set[str]:
        return {
            prop for prop, step in self._bound_steps.items()
            if self._controller.contains_step(step)
        }

    def _create_bound_step(self, prop: str, provider: PrompterProvider) -> StepFunction:
        lens = self._form.get_options(prop).lens

        def bound_step(state: Dict[str, Any]) -> StepResult:
            step_cache = self._caches.setdefault(prop, StepCache())
            state_with_cache = StateWithCache(
                state=self._form.apply_defaults(state, self._get_assigned()),
                step_cache=step_cache,
                estimator=self._create_step_estimator(state, prop),
            )
            implied_response = lens.get(self.options.implicit_state or {})
            response = self._prompt_user(state_with_cache, provider, implied_response)

            if (
                is_wizard_control(response)
                and response.type is ControlSignal.EXIT
                and self._exit_step is not None
            ):
                return StepResult(next_state=state, next_steps=[self._exit_step])

            if is_valid_response(response):
                lens.set(state, response)

            return StepResult(
                next_state=state,
                next_steps=self.resolve_next_steps(state),
                control_signal=response.type if is_wizard_control(response) else None,
            )

        bound_step.__qualname__ = f'bound_step[{prop}]'
        return bound_step

    def _create_step_estimator(self, state: Dict[str, Any], prop: str) -> StepEstimator:
        state = copy.deepcopy(state)
        lens = self._form.get_options(prop).lens

        def estimator(response: Any) -> int:
            if response is not None and not is_valid_response(response):
                return 0

            lens.set(state, response)
            try:
                estimate = len(self.resolve_next_steps(state, {prop}))
                parent_estimate = 0
                if self.options.parent_estimator is not None:
                    parent_estimate = self.options.parent_estimator(state)
            finally:
                lens.delete(state)

            return estimate + parent_estimate

        return estimator

    def _create_exit_step(self, provider: Callable[[Dict[str, Any]], Prompter]) -> StepFunction:
        def exit_step(state: Dict[str, Any]) -> StepResult:
            prompter = provider(state)
            prompter.configure(PrompterConfiguration(
                cache=StepCache(),
                steps=StepDisplay(current=self.current_step, total=self.total_steps),
            ))
            response = prompter.prompt_control()
            did_exit = response is True or (
                is_wizard_control(response) and response.type in ABORT_SIGNALS
            )

            if did_exit:
                prompter.dispose()

            return StepResult(
                next_state=state,
                control_signal=ControlSignal.EXIT if did_exit else ControlSignal.BACK,
            )

        return exit_step

    def _prompt_user(
        self,
        state: StateWithCache,
        provider: PrompterProvider,
        implied_response: Any = None,
    ) -> Any:
        prompter = provider(state)
        if prompter is None:
            return None

        step_cache = state.step_cache
        if step_cache.step_offset is not None:
            self._step_offset = step_cache.step_offset
        step_cache.step_offset = self._step_offset

        prompter.configure(PrompterConfiguration(
            cache=step_cache,
            step_estimator=state.estimator,
            steps=StepDisplay(current=self.current_step, total=self.total_steps),
        ))

        if step_cache.picked is not None:
            prompter.recent_item = step_cache.picked
        elif implied_response is not None:
            prompter.recent_item = implied_response

        answer = prompter.prompt_control()

        if is_valid_response(answer):
            step_cache.picked = prompter.recent_item
        else:
            step_cache.step_offset = None
            if self.current_step == 1 and should_dispose(answer):
                prompter.dispose()

        # Composite prompters consume more than one logical step
        extra_steps = prompter.total_steps - 1
        self._step_offset = (self._step_offset[0] + extra_steps, self._step_offset[1] + extra_steps)

        return answer


class WizardPrompter(Prompter):
    """
    Prompter that runs a whole child wizard as one step of its parent.

    The child is shifted by the parent's step numbers; build it with
    WizardOptions(parent_estimator=state.estimator) so estimates made inside
    the child include the parent's remaining steps.
    """

    def __init__(self, wizard: Wizard):
        super().__init__()
        self.wizard = wizard
        self._base: Tuple[int, int] = (0, 0)
        self._consumed = 1

    @property
    def recent_item(self) -> Any:
        # The child's per-property caches stand in for the picked value
        return self.wizard.cache

    @recent_item.setter
    def recent_item(self, value: Any) -> None:
        if value is not None:
            self.wizard.cache = value

    @property
    def total_steps(self) -> int:
        return self._consumed

    def configure(self, configuration: PrompterConfiguration) -> None:
        super().configure(configuration)
        if configuration.steps is not None:
            self._base = (configuration.steps.current - 1, configuration.steps.total - 1)
            self.wizard.step_offset = self._base

    def _prompt_user(self) -> Any:
        result = self.wizard.run()
        if result is None:
            return WIZARD_BACK
        self._consumed = max(1, self.wizard.current_step - 1 - self._base[0])
        return result
