"""WizardForm - binds state properties to prompters, visibility and defaults."""

import copy
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from .lens import PropertyLens
from .prompter import Prompter, StepCache, StepEstimator


StatePredicate = Callable[[Dict[str, Any]], bool]
DefaultProvider = Callable[[Dict[str, Any]], Any]


@dataclass
class StateWithCache:
    """
    The view of the state a prompter provider receives.

    Holds the state with defaults applied, the property's step cache and a
    step estimator for the property being asked.
    """

    state: Dict[str, Any]
    step_cache: StepCache
    estimator: StepEstimator

    def __getitem__(self, key: str) -> Any:
        return self.state[key]

    def get(self, path: str, default: Any = None) -> Any:
        return PropertyLens(path).get(self.state, default)

    def scoped(self, path: str) -> 'StateWithCache':
        """Same view narrowed to the nested object at path."""
        sub_state = PropertyLens(path).get(self.state)
        return StateWithCache(
            state=sub_state if isinstance(sub_state, dict) else {},
            step_cache=self.step_cache,
            estimator=self.estimator,
        )


PrompterProvider = Callable[[StateWithCache], Optional[Prompter]]


@dataclass
class PropertyOptions:
    lens: PropertyLens
    provider: Optional[PrompterProvider] = None
    show_when: Optional[StatePredicate] = None
    set_default: Optional[DefaultProvider] = None
    depends_on: Tuple[str, ...] = ()
    require_parent: bool = False
    order: int = 0


class PropertyBinder:
    """Binding handle for one property path, returned by form[path]."""

    def __init__(self, form: 'WizardForm', path: str):
        self._form = form
        self.path = path

    def bind_prompter(
        self,
        provider: PrompterProvider,
        show_when: Optional[StatePredicate] = None,
        depends_on: Iterable[str] = (),
        require_parent: bool = False,
        order: int = 0,
    ) -> 'PropertyBinder':
        """
        Attach a prompter provider to the property.

        Args:
            provider: Called with a StateWithCache each time the step runs
            show_when: Predicate on the defaulted state; property is asked
                only while it holds
            depends_on: Properties that must be assigned or set first
            require_parent: Hide the property while its parent object is unset
            order: Relative position among properties (stable for ties)

        Returns:
            self, for chaining set_default()
        """
        options = self._form._options_for(self.path)
        options.provider = provider
        options.show_when = show_when
        options.depends_on = tuple(depends_on)
        options.require_parent = require_parent
        options.order = order
        return self

    def set_default(self, default: Any) -> 'PropertyBinder':
        """Declare a default, either a value or a function of the state."""
        options = self._form._options_for(self.path)
        if callable(default):
            options.set_default = default
        else:
            options.set_default = lambda state, value=default: copy.deepcopy(value)
        return self

    def apply_bound_form(self, form: 'WizardForm', show_when: Optional[StatePredicate] = None) -> None:
        """
        Embed another form's bindings under this property.

        Child providers, predicates and defaults see the nested object at this
        path as their state. show_when gates every embedded property.
        """
        self._form._apply_bound_form(self.path, form, show_when)


class FormBody:
    """Binding surface exposed as Wizard.form."""

    def __init__(self, form: 'WizardForm'):
        self._form = form

    def __getitem__(self, path: str) -> PropertyBinder:
        return PropertyBinder(self._form, path)


class WizardForm:
    """
    Declarative table mapping state properties to prompter providers.

    Decides which properties can be asked for a given state, and fills in
    declared defaults for properties nobody asked about.
    """

    def __init__(self):
        self._bindings: Dict[str, PropertyOptions] = {}
        self.body = FormBody(self)

    def __getitem__(self, path: str) -> PropertyBinder:
        return PropertyBinder(self, path)

    def __contains__(self, path: str) -> bool:
        return path in self._bindings

    @property
    def properties(self) -> List[str]:
        """Bound property paths, sorted by their relative order."""
        ordered = sorted(self._bindings.items(), key=lambda item: item[1].order)
        return [path for path, _ in ordered]

    def get_options(self, path: str) -> Optional[PropertyOptions]:
        return self._bindings.get(path)

    def get_prompter_provider(self, path: str) -> Optional[PrompterProvider]:
        options = self._bindings.get(path)
        return options.provider if options else None

    def can_show_property(
        self,
        path: str,
        state: Dict[str, Any],
        assigned: Optional[Set[str]] = None,
        default_state: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Check if a property should be asked given the state so far.

        Args:
            path: Property path
            state: Current wizard state
            assigned: Properties already scheduled or answered
            default_state: State with defaults applied (computed if omitted)

        Returns:
            True if the property has a provider and all visibility rules pass
        """
        assigned = assigned if assigned is not None else set()
        options = self._bindings.get(path)

        if options is None or options.provider is None:
            return False
        if path in assigned or options.lens.is_set(state):
            return False
        if not self._parent_available(options, state):
            return False

        for dependency in options.depends_on:
            if dependency not in assigned and not self._lens_for(dependency).is_set(state):
                return False

        if options.show_when is not None:
            if default_state is None:
                default_state = self.apply_defaults(state, assigned)
            if not options.show_when(default_state):
                return False

        return True

    def apply_defaults(self, state: Dict[str, Any], assigned: Optional[Set[str]] = None) -> Dict[str, Any]:
        """
        Return a copy of state with defaults filled in.

        Only properties that are unset and not assigned receive a default;
        answers already in the state are never overwritten.
        """
        assigned = assigned if assigned is not None else set()
        default_state = copy.deepcopy(state)

        for path in self.properties:
            options = self._bindings[path]
            if options.set_default is None or path in assigned:
                continue
            if options.lens.is_set(state) or not self._parent_available(options, default_state):
                continue
            options.lens.set(default_state, options.set_default(default_state))

        return default_state

    def _options_for(self, path: str) -> PropertyOptions:
        if path not in self._bindings:
            self._bindings[path] = PropertyOptions(lens=PropertyLens(path))
        return self._bindings[path]

    def _lens_for(self, path: str) -> PropertyLens:
        options = self._bindings.get(path)
        return options.lens if options else PropertyLens(path)

    def _parent_available(self, options: PropertyOptions, state: Dict[str, Any]) -> bool:
        if not options.require_parent or options.lens.parent is None:
            return True
        return options.lens.parent.get(state) is not None

    def _apply_bound_form(
        self,
        path: str,
        form: 'WizardForm',
        show_when: Optional[StatePredicate],
    ) -> None:
        parent = PropertyLens(path)

        for child_path in form.properties:
            element = form._bindings[child_path]
            lens = parent.child(child_path)
            self._bindings[lens.path] = replace(
                element,
                lens=lens,
                provider=_scope_provider(path, element.provider),
                show_when=_scope_predicate(parent, element.show_when, show_when),
                set_default=_scope_default(parent, element.set_default),
                depends_on=tuple(f'{path}.{dep}' for dep in element.depends_on),
            )


def _sub_state(parent: PropertyLens, state: Dict[str, Any]) -> Dict[str, Any]:
    value = parent.get(state)
    return value if isinstance(value, dict) else {}


def _scope_provider(path: str, provider: Optional[PrompterProvider]) -> Optional[PrompterProvider]:
    if provider is None:
        return None
    return lambda view: provider(view.scoped(path))


def _scope_predicate(
    parent: PropertyLens,
    predicate: Optional[StatePredicate],
    outer: Optional[StatePredicate],
) -> Optional[StatePredicate]:
    if predicate is None and outer is None:
        return None

    def show_when(state: Dict[str, Any]) -> bool:
        if outer is not None and not outer(state):
            return False
        return predicate is None or predicate(_sub_state(parent, state))

    return show_when


def _scope_default(parent: PropertyLens, default: Optional[DefaultProvider]) -> Optional[DefaultProvider]:
    if default is None:
        return None
    return lambda state: default(_sub_state(parent, state))
