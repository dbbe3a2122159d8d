"""PropertyLens - typed access to one property of a nested state dict."""

from typing import Any, Dict, Optional, Tuple


_MISSING = object()


class PropertyLens:
    """
    Reads and writes a property addressed by a dotted path.

    The path is split once when the lens is created, e.g. 'deploy.region'
    addresses state['deploy']['region']. Intermediate dicts are created on
    write.
    """

    def __init__(self, path: str):
        if not path or any(not part for part in path.split('.')):
            raise ValueError(f"Invalid property path: {path!r}")
        self.path = path
        self.parts: Tuple[str, ...] = tuple(path.split('.'))

    def __repr__(self) -> str:
        return f'PropertyLens({self.path!r})'

    @property
    def parent(self) -> Optional['PropertyLens']:
        """Lens for the containing object, or None for top-level properties."""
        if len(self.parts) == 1:
            return None
        return PropertyLens('.'.join(self.parts[:-1]))

    def get(self, state: Dict[str, Any], default: Any = None) -> Any:
        node: Any = state
        for part in self.parts:
            if not isinstance(node, dict):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return node

    def is_set(self, state: Dict[str, Any]) -> bool:
        return self.get(state, _MISSING) not in (_MISSING, None)

    def set(self, state: Dict[str, Any], value: Any) -> Dict[str, Any]:
        """Write value into state in place and return the same state."""
        node = state
        for part in self.parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[self.parts[-1]] = value
        return state

    def delete(self, state: Dict[str, Any]) -> Dict[str, Any]:
        """Remove the property if present; parents are left in place."""
        node: Any = state
        for part in self.parts[:-1]:
            node = node.get(part) if isinstance(node, dict) else None
            if node is None:
                return state
        if isinstance(node, dict):
            node.pop(self.parts[-1], None)
        return state

    def child(self, path: str) -> 'PropertyLens':
        """Lens for a path nested under this one."""
        return PropertyLens(f'{self.path}.{path}')
