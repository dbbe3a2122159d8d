"""Condition strings for show_when - parsed once into state predicates."""

import re
from typing import Any, Callable, Dict

from .lens import PropertyLens


Predicate = Callable[[Dict[str, Any]], bool]

_COMPARISON = re.compile(r'^state\.([\w.]+)\s*(==|!=)\s*(.+)$')
_TRUTHY = re.compile(r'^(not\s+)?state\.([\w.]+)$')


def parse_literal(text: str) -> Any:
    """Parse the right-hand side of a comparison.

    Examples:
        >>> parse_literal('3')
        3
        >>> parse_literal('1.5')
        1.5
        >>> parse_literal('"prod"')
        'prod'
        >>> parse_literal('true')
        True
    """
    text = text.strip()
    lowered = text.lower()
    if lowered in ('true', 'false'):
        return lowered == 'true'
    if lowered in ('none', 'null'):
        return None
    try:
        return int(text)
    except ValueError:
        pass
    # 'inf' and 'nan' stay strings
    if any(ch.isdigit() for ch in text):
        try:
            return float(text)
        except ValueError:
            pass
    return text.strip('"\'')


def parse_condition(condition: str) -> Predicate:
    """
    Compile a condition into a predicate on the wizard state.

    Supported forms:
    - state.key == value
    - state.key != value
    - state.key (truthy)
    - not state.key

    Args:
        condition: Condition string

    Returns:
        Function of the state returning True when the condition holds

    Raises:
        ValueError: If the condition cannot be parsed
    """
    condition = condition.strip()

    match = _COMPARISON.match(condition)
    if match:
        lens = PropertyLens(match.group(1))
        expected = parse_literal(match.group(3))
        if match.group(2) == '==':
            return lambda state: lens.get(state) == expected
        return lambda state: lens.get(state) != expected

    match = _TRUTHY.match(condition)
    if match:
        lens = PropertyLens(match.group(2))
        if match.group(1):
            return lambda state: not lens.get(state)
        return lambda state: bool(lens.get(state))

    raise ValueError(f"Invalid condition: {condition}")
