"""Prompter interface - a single question asked by the wizard."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple


StepEstimator = Callable[[Any], int]


@dataclass
class StepCache:
    """
    Per-property scratch data kept for the lifetime of a wizard.

    Attributes:
        picked: Last accepted answer, used to pre-select on revisits
        step_offset: (current, total) offset saved when the step was shown
        data: Free-form values a prompter wants to keep between visits
    """

    picked: Any = None
    step_offset: Optional[Tuple[int, int]] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StepDisplay:
    current: int
    total: int


@dataclass
class PrompterConfiguration:
    """Everything the wizard hands a prompter before asking."""

    cache: StepCache
    step_estimator: Optional[StepEstimator] = None
    steps: Optional[StepDisplay] = None


class Prompter(ABC):
    """
    Base class for single-question prompts.

    Subclasses implement _prompt_user(), which blocks until the user
    answers. It returns the answer, None when the user skipped, or a
    WizardControl for navigation.
    """

    def __init__(self):
        self._recent_item: Any = None
        self._disposed = False
        self.cache: StepCache = StepCache()
        self.step_estimator: Optional[StepEstimator] = None
        self.steps: Optional[StepDisplay] = None

    @property
    def recent_item(self) -> Any:
        """Pre-selected value before prompting, picked value afterwards."""
        return self._recent_item

    @recent_item.setter
    def recent_item(self, value: Any) -> None:
        self._recent_item = value

    @property
    def total_steps(self) -> int:
        """Logical wizard steps this prompt consumes."""
        return 1

    @property
    def disposed(self) -> bool:
        return self._disposed

    def configure(self, configuration: PrompterConfiguration) -> None:
        self.cache = configuration.cache
        self.step_estimator = configuration.step_estimator
        self.steps = configuration.steps

    def estimate_steps(self, response: Any) -> int:
        """Steps a hypothetical answer would add, 0 without an estimator."""
        if self.step_estimator is None:
            return 0
        return self.step_estimator(response)

    def prompt_control(self) -> Any:
        """Ask the question and return the answer, None or a WizardControl."""
        if self._disposed:
            raise RuntimeError("Cannot prompt with a disposed prompter")
        return self._prompt_user()

    def dispose(self) -> None:
        """Release resources held by the prompt. Safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        self._release()

    @abstractmethod
    def _prompt_user(self) -> Any:
        pass

    def _release(self) -> None:
        pass
