"""Console prompters - questions asked through an InputRunner."""

from typing import Any, Callable, Dict, List, Optional

from .controls import WIZARD_BACK, WIZARD_EXIT, WIZARD_FORCE_EXIT, WIZARD_RETRY, WizardControl
from .prompter import Prompter
from .runner import InputRunner


# Typed instead of an answer to navigate the wizard
CONTROL_KEYWORDS: Dict[str, WizardControl] = {
    ':back': WIZARD_BACK,
    ':exit': WIZARD_EXIT,
    ':quit': WIZARD_FORCE_EXIT,
    ':retry': WIZARD_RETRY,
}

Validator = Callable[[Any], Any]


def parse_control(raw: Any) -> Optional[WizardControl]:
    """Return the control a keyword stands for, or None for a normal answer."""
    if isinstance(raw, WizardControl):
        return raw
    if isinstance(raw, str):
        return CONTROL_KEYWORDS.get(raw.strip().lower())
    return None


class ConsolePrompter(Prompter):
    """Common plumbing for prompters that talk through an InputRunner."""

    def __init__(self, runner: InputRunner, prompt: str, fail_fast: bool = False):
        """
        Args:
            runner: I/O backend
            prompt: Question text
            fail_fast: Raise invalid input errors instead of re-prompting
        """
        super().__init__()
        self.runner = runner
        self.prompt = prompt
        self.fail_fast = fail_fast

    def _show_header(self) -> None:
        if self.steps is not None:
            self.runner.display(f"Step {self.steps.current} of {self.steps.total}")

    def _report_invalid(self, error: ValueError) -> None:
        if self.fail_fast:
            raise error
        self.runner.display(f"Error: {error}")


class InputPrompter(ConsolePrompter):
    """Free-form answer converted to a string, integer or boolean."""

    VALUE_TYPES = ('string', 'integer', 'boolean')

    def __init__(
        self,
        runner: InputRunner,
        prompt: str,
        value_type: str = 'string',
        validator: Optional[Validator] = None,
        fail_fast: bool = False,
    ):
        if value_type not in self.VALUE_TYPES:
            raise ValueError(f"Unsupported value type: {value_type}")
        super().__init__(runner, prompt, fail_fast)
        self.value_type = value_type
        self.validator = validator

    def _prompt_user(self) -> Any:
        self._show_header()

        while True:
            raw = self.runner.get_input(self.prompt, self.recent_item)

            control = parse_control(raw)
            if control is not None:
                return control

            try:
                value = self._convert(raw)
                # Only validate if we have a non-empty value
                if self.validator is not None and value not in (None, ''):
                    value = self.validator(value)
            except ValueError as e:
                self._report_invalid(e)
                continue

            if value is None or value == '':
                return None

            self.recent_item = value
            return value

    def _convert(self, raw: Any) -> Any:
        if self.value_type == 'integer' and raw not in (None, ''):
            if isinstance(raw, bool):
                raise ValueError(f"Invalid integer value: {raw}")
            try:
                return int(raw)
            except (TypeError, ValueError):
                raise ValueError(f"Invalid integer value: {raw}")
        if self.value_type == 'boolean' and isinstance(raw, str) and raw:
            # Convert string to boolean (y/yes/true -> True, n/no/false -> False)
            return raw.lower().strip() in ('y', 'yes', 'true', '1')
        return raw


class ConfirmPrompter(InputPrompter):
    """Yes/no question; used as the exit confirmation prompt."""

    def __init__(self, runner: InputRunner, prompt: str, default: bool = False):
        super().__init__(runner, prompt, value_type='boolean')
        self.recent_item = default


class ChoicePrompter(ConsolePrompter):
    """
    Numbered list of options.

    Each option shows how many extra steps picking it would add, using the
    step estimator the wizard configured.
    """

    def __init__(
        self,
        runner: InputRunner,
        prompt: str,
        options: List[Dict[str, Any]],
        fail_fast: bool = False,
    ):
        if not options:
            raise ValueError("ChoicePrompter needs at least one option")
        super().__init__(runner, prompt, fail_fast)
        self.options = options

    def _prompt_user(self) -> Any:
        self._show_header()

        self.runner.display("")  # Blank line before options
        for i, option in enumerate(self.options, 1):
            self.runner.display(f"  {i}. {self._describe(option)}")
        self.runner.display("")  # Blank line after options

        while True:
            raw = self.runner.get_input(self.prompt, self._default_index())

            control = parse_control(raw)
            if control is not None:
                return control

            if raw is None or raw == '':
                return None

            try:
                value = self._resolve(raw)
            except ValueError as e:
                self._report_invalid(e)
                continue

            self.recent_item = value
            return value

    def _describe(self, option: Dict[str, Any]) -> str:
        label = option.get('label') or str(option.get('value'))
        extra = self.estimate_steps(option.get('value'))
        if extra == 1:
            return f"{label} (+1 step)"
        if extra > 1:
            return f"{label} (+{extra} steps)"
        return label

    def _default_index(self) -> Optional[int]:
        for i, option in enumerate(self.options, 1):
            if self.recent_item is not None and option.get('value') == self.recent_item:
                return i
        return None

    def _resolve(self, raw: Any) -> Any:
        """Accept an option number or an option value."""
        text = str(raw).strip()
        if text.isdigit():
            index = int(text)
            if 1 <= index <= len(self.options):
                return self.options[index - 1].get('value')
        for option in self.options:
            if str(option.get('value')) == text:
                return option.get('value')
        raise ValueError(f"Invalid choice: {raw}")
