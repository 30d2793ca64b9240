"""Named-object workspace that loaded data lands in."""
from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, List


class Workspace(MutableMapping):
    """A mapping of names to loaded objects.

    ``load`` and ``data`` restore objects into a workspace under their saved
    names, overwriting whatever was there.

    Example:
        >>> ws = Workspace()
        >>> ws.assign("cars", df)
        >>> ws.ls()
        ['cars']
    """

    def __init__(self, **objects: Any):
        self._objects: Dict[str, Any] = {}
        for name, value in objects.items():
            self[name] = value

    @staticmethod
    def _check_name(name: Any) -> str:
        if not isinstance(name, str):
            raise TypeError(f"object names must be strings, not {type(name).__name__}")
        if not name:
            raise ValueError("object names must be non-empty")
        return name

    def __getitem__(self, name: str) -> Any:
        try:
            return self._objects[name]
        except KeyError:
            raise KeyError(f"object '{name}' not found") from None

    def __setitem__(self, name: str, value: Any) -> None:
        self._objects[self._check_name(name)] = value

    def __delitem__(self, name: str) -> None:
        try:
            del self._objects[name]
        except KeyError:
            raise KeyError(f"object '{name}' not found") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __repr__(self) -> str:
        return f"Workspace({', '.join(self.ls())})"

    def ls(self) -> List[str]:
        """Names of all objects, sorted."""
        return sorted(self._objects)

    def assign(self, name: str, value: Any) -> None:
        self[name] = value

    def rm(self, *names: str) -> None:
        """Remove objects; every name must exist."""
        missing = [n for n in names if n not in self._objects]
        if missing:
            raise KeyError(f"object '{missing[0]}' not found")
        for name in names:
            del self._objects[name]

    def clear(self) -> None:
        self._objects.clear()


# Default target for load() and data()
workspace = Workspace()
