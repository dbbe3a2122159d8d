"""Shared fixtures and fake prompters for wizard tests."""

import pytest

from flowwizard.engine.controls import is_valid_response
from flowwizard.engine.prompter import Prompter
from flowwizard.engine.runner import MockInputRunner


class FakePrompter(Prompter):
    """Scripted prompter: pops responses from a shared list and records what it saw.

    A response may be a callable taking the prompter, so tests can inspect
    the configuration (steps, estimator, cache) at prompt time.
    """

    def __init__(self, responses, total_steps=1):
        super().__init__()
        self.responses = responses
        self._total_steps = total_steps
        self.configurations = []
        self.recent_at_prompt = []
        self.dispose_count = 0

    @property
    def total_steps(self):
        return self._total_steps

    def configure(self, configuration):
        super().configure(configuration)
        self.configurations.append(configuration)

    def _prompt_user(self):
        self.recent_at_prompt.append(self.recent_item)
        response = self.responses.pop(0)
        if callable(response):
            response = response(self)
        if is_valid_response(response):
            self.recent_item = response
        return response

    def _release(self):
        self.dispose_count += 1


class ScriptedProvider:
    """Prompter provider creating a fresh FakePrompter per step execution."""

    def __init__(self, *responses, total_steps=1):
        self.responses = list(responses)
        self.total_steps = total_steps
        self.prompters = []
        self.views = []

    def __call__(self, view):
        self.views.append(view)
        prompter = FakePrompter(self.responses, self.total_steps)
        self.prompters.append(prompter)
        return prompter

    @property
    def calls(self):
        return len(self.prompters)

    @property
    def steps_seen(self):
        """(current, total) shown by each prompt, in order."""
        return [
            (p.configurations[-1].steps.current, p.configurations[-1].steps.total)
            for p in self.prompters
        ]


@pytest.fixture
def mock_runner():
    """Create a mock input runner for testing."""
    return MockInputRunner()
