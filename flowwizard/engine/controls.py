"""Control signals - navigation outcomes that travel alongside answers."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ControlSignal(Enum):
    """Navigational intents a step can report instead of an answer."""

    EXIT = 'exit'
    FORCE_EXIT = 'force_exit'
    BACK = 'back'
    RETRY = 'retry'


ABORT_SIGNALS = frozenset({ControlSignal.EXIT, ControlSignal.FORCE_EXIT})


@dataclass(frozen=True)
class WizardControl:
    """
    Wraps a ControlSignal so it can be returned through the same channel
    as a prompt answer without being mistaken for one.

    WIZARD_EXIT lets the wizard ask for exit confirmation when it has an
    exit prompter; WIZARD_FORCE_EXIT always aborts immediately.
    """

    type: ControlSignal

    def __str__(self) -> str:
        return f'[WIZARD_CONTROL] {self.type.value}'


WIZARD_EXIT = WizardControl(ControlSignal.EXIT)
WIZARD_FORCE_EXIT = WizardControl(ControlSignal.FORCE_EXIT)
WIZARD_BACK = WizardControl(ControlSignal.BACK)
WIZARD_RETRY = WizardControl(ControlSignal.RETRY)


def is_wizard_control(obj: Any) -> bool:
    """Return True if obj is a WizardControl rather than an answer."""
    return isinstance(obj, WizardControl)


def is_valid_response(response: Any) -> bool:
    """Check if a prompt response is an actual answer.

    None means the user skipped or cancelled; a WizardControl is navigation.

    Args:
        response: Value returned by a prompter

    Returns:
        True only for real answers
    """
    return response is not None and not is_wizard_control(response)


def should_dispose(control: Any) -> bool:
    """Controls that abandon the prompt for good when issued at step 1."""
    return is_wizard_control(control) and control.type in (
        ControlSignal.EXIT,
        ControlSignal.FORCE_EXIT,
        ControlSignal.BACK,
    )
