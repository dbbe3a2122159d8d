"""Wizard engine - core infrastructure for dynamic multi-step prompt flows."""

from .controller import ControllerStatus, StateMachineController, StepResult
from .controls import (
    ControlSignal,
    WizardControl,
    WIZARD_BACK,
    WIZARD_EXIT,
    WIZARD_FORCE_EXIT,
    WIZARD_RETRY,
    is_valid_response,
    is_wizard_control,
)
from .engine import WizardEngine
from .exceptions import WizardError, WizardRunningError
from .form import StateWithCache, WizardForm
from .lens import PropertyLens
from .loader import SpecLoader
from .prompter import Prompter, PrompterConfiguration, StepCache, StepDisplay
from .prompters import ChoicePrompter, ConfirmPrompter, InputPrompter
from .runner import InputRunner, RealInputRunner, MockInputRunner
from .schema import FormSpec, PropertySpec, ExitSpec
from .wizard import Wizard, WizardOptions, WizardPrompter

__all__ = [
    'ControllerStatus',
    'StateMachineController',
    'StepResult',
    'ControlSignal',
    'WizardControl',
    'WIZARD_BACK',
    'WIZARD_EXIT',
    'WIZARD_FORCE_EXIT',
    'WIZARD_RETRY',
    'is_valid_response',
    'is_wizard_control',
    'WizardEngine',
    'WizardError',
    'WizardRunningError',
    'StateWithCache',
    'WizardForm',
    'PropertyLens',
    'SpecLoader',
    'Prompter',
    'PrompterConfiguration',
    'StepCache',
    'StepDisplay',
    'ChoicePrompter',
    'ConfirmPrompter',
    'InputPrompter',
    'InputRunner',
    'RealInputRunner',
    'MockInputRunner',
    'FormSpec',
    'PropertySpec',
    'ExitSpec',
    'Wizard',
    'WizardOptions',
    'WizardPrompter',
]
