from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, ClassVar, Dict, Tuple


@dataclass(frozen=True)
class ContactRecord:
    name: str = ""
    email: str = ""
    phone: str = ""
    job_title: str = ""
    website: str = ""

    # external key -> attribute name, in output order
    FIELDS: ClassVar[Tuple[str, ...]] = ("name", "email", "phone", "jobTitle", "website")
    _ATTRIBUTES: ClassVar[Dict[str, str]] = {
        "name": "name",
        "email": "email",
        "phone": "phone",
        "jobTitle": "job_title",
        "website": "website",
    }

    @classmethod
    def attribute_names(cls) -> Tuple[str, ...]:
        return tuple(item.name for item in fields(cls))

    @classmethod
    def from_mapping(cls, payload: Dict[str, Any]) -> "ContactRecord":
        values: Dict[str, str] = {}
        for key, attribute in cls._ATTRIBUTES.items():
            raw = payload.get(key)
            if raw is None:
                raw = payload.get(attribute)
            values[attribute] = str(raw or "").strip()
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        return {key: getattr(self, attribute) for key, attribute in self._ATTRIBUTES.items()}

    def is_empty(self) -> bool:
        return not any(getattr(self, attribute) for attribute in self._ATTRIBUTES.values())

    def replace(self, **changes: Any) -> "ContactRecord":
        return replace(self, **changes)
