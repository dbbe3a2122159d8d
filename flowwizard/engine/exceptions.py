"""Exceptions raised by the wizard engine."""


class WizardError(Exception):
    """Base class for wizard usage errors."""


class WizardRunningError(WizardError, RuntimeError):
    """Raised when state owned by a running wizard is touched from outside."""
