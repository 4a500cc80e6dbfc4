"""
Tunable-parameter stores.

``ArmController`` reads its setpoint and proportional gain from a store of
named doubles so that they can be retuned between runs without code
changes.  Two stores are provided: a plain in-memory mapping and one that
persists to a JSON file.

Classes:
    PreferenceStore: Abstract named-double store.
    InMemoryPreferences: Dictionary-backed store.
    JsonPreferences: Store persisted to a JSON file on every write.
"""

from __future__ import annotations

import abc
import json
from pathlib import Path
from typing import Dict, Optional


class PreferenceStore(abc.ABC):
    """Named double values with caller-supplied defaults."""

    @abc.abstractmethod
    def contains_key(self, key: str) -> bool:
        """Whether *key* has a stored value."""
        raise NotImplementedError

    @abc.abstractmethod
    def set_double(self, key: str, value: float) -> None:
        """Store *value* under *key*, replacing any existing value."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_double(self, key: str, default: float) -> float:
        """Return the value stored under *key*, or *default* if absent."""
        raise NotImplementedError

    def init_double(self, key: str, value: float) -> None:
        """Store *value* only if *key* does not exist yet."""
        if not self.contains_key(key):
            self.set_double(key, value)


class InMemoryPreferences(PreferenceStore):
    """Preference store held in a dictionary.

    Attributes:
        values: The stored key/value pairs.
    """

    def __init__(self, values: Optional[Dict[str, float]] = None) -> None:
        self.values: Dict[str, float] = dict(values or {})

    def contains_key(self, key: str) -> bool:
        return key in self.values

    def set_double(self, key: str, value: float) -> None:
        self.values[key] = float(value)

    def get_double(self, key: str, default: float) -> float:
        return float(self.values.get(key, default))


class JsonPreferences(InMemoryPreferences):
    """Preference store backed by a JSON object on disk.

    The file is read once at construction and rewritten after every
    ``set_double``.

    Attributes:
        path: Location of the JSON file.
    """

    def __init__(self, path: str | Path) -> None:
        """Load *path* if it exists.

        Args:
            path: JSON file holding a flat ``{key: number}`` object.

        Raises:
            ValueError: If the file does not hold a JSON object.
        """
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, float]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text())
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a JSON object")
        return {str(k): float(v) for k, v in data.items()}

    def set_double(self, key: str, value: float) -> None:
        super().set_double(key, value)
        self._save()

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.values, indent=2, sort_keys=True))
