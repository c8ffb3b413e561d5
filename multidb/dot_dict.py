"""
Dictionary-like object with attribute access and dot-path lookups.

Used as the in-memory representation of loaded configuration so that settings
can be read either as ``cfg.paths.clients`` or ``cfg.get("paths.clients")``.
"""

from collections.abc import ItemsView, Iterator, KeysView, ValuesView
from typing import Any


class DotDict:
    """
    Dictionary-like object with attribute-style access and nested structure support.

    Nested dictionaries are converted to DotDict instances on assignment, lists
    have their dict entries converted as well.
    """

    # Keys that would shadow methods used by the rest of the package
    _RESERVED_KEYS = frozenset({"set", "clear", "dict", "get", "has"})

    def __init__(self, **kwargs: Any) -> None:
        self.set(**kwargs)

    def set(self, **kwargs: Any) -> "DotDict":
        """Set multiple key-value pairs, converting nested dicts. Returns self."""
        for key, val in kwargs.items():
            self._set_item(key, val)
        return self

    def _set_item(self, key: Any, val: Any) -> None:
        key = str(key)
        if key in self._RESERVED_KEYS:
            raise ValueError(
                f"Key '{key}' is reserved and cannot be used (would shadow method)"
            )

        if isinstance(val, dict):
            setattr(self, key, DotDict(**{str(k): v for k, v in val.items()}))
        elif isinstance(val, list):
            setattr(self, key, [self._map_entry(v) for v in val])
        else:
            setattr(self, key, val)

    @staticmethod
    def _map_entry(entry: Any) -> Any:
        if isinstance(entry, dict):
            return DotDict(**{str(k): v for k, v in entry.items()})
        return entry

    def _data(self) -> dict[str, Any]:
        # Attributes starting with "_" are bookkeeping, not configuration keys
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    def clear(self) -> None:
        """Remove all keys."""
        for k in list(self._data()):
            delattr(self, k)

    def dict(self) -> dict[str, Any]:
        """Recursively convert to plain dicts and lists."""
        result: dict[str, Any] = {}
        for key, val in self._data().items():
            if isinstance(val, DotDict):
                result[key] = val.dict()
            elif isinstance(val, list):
                result[key] = [v.dict() if isinstance(v, DotDict) else v for v in val]
            else:
                result[key] = val
        return result

    def keys(self) -> KeysView[str]:
        return self._data().keys()

    def values(self) -> ValuesView[Any]:
        return self._data().values()

    def items(self) -> ItemsView[str, Any]:
        return self._data().items()

    def __iter__(self) -> Iterator[str]:
        return iter(self._data())

    def __contains__(self, key: Any) -> bool:
        return key in self._data()

    def __getitem__(self, key: str) -> Any:
        return self._data().get(key)

    def __setitem__(self, key: str, val: Any) -> None:
        self._set_item(key, val)

    def __len__(self) -> int:
        return len(self._data())

    def __str__(self) -> str:
        return str(self.dict())

    def has(self, path: str) -> bool:
        """
        Check if a dot-separated path exists.

        Args:
            path: Dot-separated path to check (e.g., "paths.clients")

        Returns:
            bool: True if the path exists
        """
        sentinel = object()
        return self.get(path, sentinel) is not sentinel

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get value by dot-separated path.

        Follows dict.get() semantics: returns default if the path is not found.

        Args:
            path: Dot-separated path (e.g., "health.timeout")
            default: Value returned when any path component is missing

        Returns:
            Found value or default
        """
        if not path:
            return default

        cur: Any = self
        for item in (p for p in path.split(".") if p):
            if not isinstance(cur, DotDict) or item not in cur:
                return default
            cur = cur[item]
        return cur
