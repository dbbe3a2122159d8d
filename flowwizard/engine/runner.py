"""InputRunner interface - all terminal I/O of the console prompters goes here."""

import os
from abc import ABC, abstractmethod
from typing import Any, List, Optional


class InputRunner(ABC):
    """Interface for talking to the user."""

    @abstractmethod
    def display(self, message: str) -> None:
        """Display a message to the user.

        Args:
            message: Text to display (may contain newlines)
        """
        pass

    @abstractmethod
    def get_input(self, prompt: str, default: Any = None) -> str:
        """Get input from user.

        Args:
            prompt: Question to ask user
            default: Default value if user presses Enter (shown in [brackets])

        Returns:
            User's input string (or default if empty)
        """
        pass


class RealInputRunner(InputRunner):
    """Real implementation - reads stdin and prints to stdout."""

    def __init__(self, verbose: bool = False):
        """Initialize with optional verbose mode.

        Args:
            verbose: If True, echo every answer back to the terminal
        """
        self.verbose = verbose
        # Check for verbose environment variable as well
        if os.environ.get('FLOWWIZARD_VERBOSE'):
            self.verbose = True

    def display(self, message: str) -> None:
        """Print message to stdout."""
        print(message)

    def get_input(self, prompt: str, default: Any = None) -> str:
        """Read from stdin with optional default."""
        if default is not None:
            # Special formatting for boolean defaults
            if isinstance(default, bool):
                default_display = 'Y/n' if default else 'y/N'
            else:
                default_display = str(default)
            response = input(f"{prompt} [{default_display}]: ").strip()
        else:
            response = input(f"{prompt}: ").strip()
        print()  # Add newline after user input

        if self.verbose:
            print(f"[VERBOSE] Answer: {response!r}")

        if response:
            return response
        if default is None:
            return ''
        return default if isinstance(default, bool) else str(default)


class MockInputRunner(InputRunner):
    """Mock for testing - records calls and replays scripted input."""

    def __init__(self, input_queue: Optional[List[Any]] = None):
        self.calls: List[tuple] = []
        self.input_queue: List[Any] = list(input_queue or [])  # Pre-scripted user inputs

    @property
    def displayed(self) -> List[str]:
        """Messages passed to display(), in order."""
        return [call[1] for call in self.calls if call[0] == 'display']

    def display(self, message: str) -> None:
        """Capture display call for test verification."""
        self.calls.append(('display', message))

    def get_input(self, prompt: str, default: Any = None) -> str:
        """Return next value from input_queue."""
        self.calls.append(('get_input', prompt, default))

        # Pop next scripted response
        if self.input_queue:
            response = self.input_queue.pop(0)
            # Match RealInputRunner: apply default if response is empty
            if response == '' and default is not None:
                return default
            return response

        # Fall back to default or empty string
        return default if default is not None else ''
