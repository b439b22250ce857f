from __future__ import annotations
import re
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from .errors import NotFoundError, ValidationError

_WS = re.compile(r"\s+")


def slugify(text: str) -> str:
    return _WS.sub("-", text.strip().lower())


DEFAULT_CATEGORIES = {
    "sap-ewm": "SAP EWM",
    "sap-mm": "SAP MM",
    "documentation": "Documentation",
    "testing": "Testing",
    "meetings": "Meetings",
}

DEFAULT_SYSTEMS = {
    "dev": "Development",
    "qa": "Quality Assurance",
    "prod": "Production",
}

DEFAULT_TASK_TYPES = {
    "implementation": "Implementation",
    "support": "Support",
    "enhancement": "Enhancement",
    "bug-fix": "Bug Fix",
}


class OptionSet:
    """
    User-editable slug -> label mapping. Membership is never enforced on
    tasks: a removed slug stays on the tasks that use it and label_for()
    falls back to the slug itself.
    """

    def __init__(self, name: str, entries: Optional[Mapping[str, str]] = None):
        self.name = name
        self._entries: Dict[str, str] = dict(entries or {})

    def add(self, key: str, label: str) -> str:
        if not key.strip() or not label.strip():
            raise ValidationError(f"{self.name}: key and label are required")
        slug = slugify(key)
        self._entries[slug] = label.strip()
        return slug

    def remove(self, key: str) -> None:
        if key not in self._entries:
            raise NotFoundError(key)
        del self._entries[key]

    def label_for(self, key: str) -> str:
        return self._entries.get(key, key)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._entries.items())

    def to_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class Options:
    def __init__(
        self,
        categories: Optional[Mapping[str, str]] = None,
        systems: Optional[Mapping[str, str]] = None,
        task_types: Optional[Mapping[str, str]] = None,
    ):
        self.categories = OptionSet("categories", DEFAULT_CATEGORIES if categories is None else categories)
        self.systems = OptionSet("systems", DEFAULT_SYSTEMS if systems is None else systems)
        self.task_types = OptionSet("taskTypes", DEFAULT_TASK_TYPES if task_types is None else task_types)

    def all(self) -> List[OptionSet]:
        return [self.categories, self.systems, self.task_types]
