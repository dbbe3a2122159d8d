"""Wizard engine - builds and runs wizards from declarative form specs."""

import logging
import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from flowwizard.utils.log import configure_logging

from .conditions import parse_condition
from .form import StateWithCache, WizardForm
from .lens import PropertyLens
from .loader import SpecLoader
from .prompter import Prompter
from .prompters import ChoicePrompter, ConfirmPrompter, InputPrompter
from .runner import InputRunner
from .schema import FormSpec, PropertySpec
from .wizard import Wizard, WizardOptions

logger = logging.getLogger(__name__)

_MISSING = object()


class WizardEngine:
    """
    Executes form specs with dependency injection.

    Key responsibilities:
    - Load form specs
    - Turn each property into a console prompter bound to a WizardForm
    - Inject the runner for all user I/O
    - Support headless mode for testing
    """

    def __init__(self, runner: InputRunner, base_path: Optional[Path] = None, verbose: bool = False):
        """
        Initialize the wizard engine.

        Args:
            runner: InputRunner implementation for user I/O
            base_path: Directory holding the forms/ folder (default: ./flowwizard)
            verbose: Log scheduling decisions at DEBUG level
        """
        self.runner = runner
        self.loader = SpecLoader(base_path=base_path)
        self.state: Dict[str, Any] = {}
        self.validators: Dict[str, Callable[[Any, Dict[str, Any]], Any]] = {}
        self.headless_mode = False
        self.verbose = verbose or bool(os.environ.get('FLOWWIZARD_VERBOSE'))
        if self.verbose:
            configure_logging("DEBUG")

    def _interpolate_prompt(self, prompt: str, state: dict) -> str:
        """Replace {path} placeholders with state values.

        Args:
            prompt: Template string with {placeholders}
            state: Current wizard state

        Returns:
            Interpolated string with values filled in

        Examples:
            >>> engine._interpolate_prompt("Found {scan.count} items", {'scan': {'count': 5}})
            'Found 5 items'
        """
        def replacer(match):
            key = match.group(1)
            try:
                value = PropertyLens(key).get(state, _MISSING)
            except ValueError:
                value = _MISSING
            if value is _MISSING:
                return f'{{{key}}}'  # Keep {key} if not found
            return str(value)

        return re.sub(r'\{([^}]+)\}', replacer, prompt)

    def _initial_default(self, prop: PropertySpec, state: Dict[str, Any]) -> Any:
        """Default shown for a property: state value at default_from, else default_value."""
        if prop.default_from:
            return PropertyLens(prop.default_from).get(state, prop.default_value)
        return prop.default_value

    def _validator_for(self, prop: PropertySpec, state: Dict[str, Any]) -> Optional[Callable[[Any], Any]]:
        if not prop.validator:
            return None
        if prop.validator not in self.validators:
            # No validator function registered, use value as-is
            logger.debug("No validator registered for %s", prop.validator)
            return None
        validator_fn = self.validators[prop.validator]
        return lambda value: validator_fn(value, state)

    def _provider_for(self, prop: PropertySpec) -> Callable[[StateWithCache], Prompter]:
        def provider(view: StateWithCache) -> Prompter:
            prompt = self._interpolate_prompt(prop.prompt, view.state)

            if prop.type == 'enum':
                prompter: Prompter = ChoicePrompter(
                    self.runner, prompt, prop.options or [], fail_fast=self.headless_mode
                )
            else:
                prompter = InputPrompter(
                    self.runner,
                    prompt,
                    value_type=prop.type,
                    validator=self._validator_for(prop, view.state),
                    fail_fast=self.headless_mode,
                )

            prompter.recent_item = self._initial_default(prop, view.state)
            return prompter

        return provider

    def build_form(self, spec: FormSpec) -> WizardForm:
        """
        Bind every property of a form spec to a console prompter.

        Args:
            spec: Validated form spec

        Returns:
            WizardForm ready to be run by a Wizard

        Raises:
            ValueError: If a show_when condition is invalid
        """
        form = WizardForm()

        for prop in spec.properties:
            binder = form[prop.id].bind_prompter(
                self._provider_for(prop),
                show_when=parse_condition(prop.show_when) if prop.show_when else None,
                depends_on=prop.depends_on,
                require_parent=prop.require_parent,
                order=prop.order,
            )
            if prop.default_from:
                binder.set_default(lambda state, prop=prop: self._initial_default(prop, state))
            elif prop.default_value is not None:
                binder.set_default(prop.default_value)

        return form

    def build_wizard(
        self,
        form_name: str,
        headless_inputs: Optional[Dict[str, Any]] = None,
        init_state: Optional[Dict[str, Any]] = None,
    ) -> Wizard:
        """
        Create a Wizard for a form spec.

        Args:
            form_name: Name of form to load (e.g., 'deploy')
            headless_inputs: Optional {property id: value} answers, used as
                pre-selections for each prompt
            init_state: Starting state; properties already set are not asked

        Returns:
            Wizard ready to run
        """
        spec = self.loader.load_form(form_name)

        implicit_state: Dict[str, Any] = {}
        for prop_id, value in (headless_inputs or {}).items():
            PropertyLens(prop_id).set(implicit_state, value)

        exit_prompter = None
        if spec.exit_confirmation is not None:
            exit_prompt = spec.exit_confirmation.prompt
            exit_prompter = lambda state: ConfirmPrompter(self.runner, exit_prompt)

        return Wizard(WizardOptions(
            init_form=self.build_form(spec),
            init_state=init_state,
            exit_prompter=exit_prompter,
            implicit_state=implicit_state,
        ))

    def execute_form(
        self,
        form_name: str,
        headless_inputs: Optional[Dict[str, Any]] = None,
        init_state: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Run a form and return the collected state.

        Args:
            form_name: Name of form to execute (e.g., 'deploy')
            headless_inputs: Optional dict of pre-provided answers for testing
                            If None: INTERACTIVE mode (prompt user via runner)
                            If provided: HEADLESS mode (invalid input fails fast)
            init_state: Starting state

        Returns:
            Final state, or None if the user exited
        """
        # Determine mode
        self.headless_mode = headless_inputs is not None

        wizard = self.build_wizard(form_name, headless_inputs, init_state)
        logger.info("Running form %s", form_name)
        result = wizard.run()

        self.state = result if result is not None else {}
        return result
