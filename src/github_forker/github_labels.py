"""Label definitions copied between repositories.

A label is identified by its name; color and description are looked up on the
source repository and recreated verbatim on the fork.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_LABEL_COLOR = "d73a4a"


@dataclass(frozen=True, slots=True)
class LabelSpec:
    name: str
    color: str
    description: str

    @classmethod
    def from_api(cls, data: object) -> LabelSpec:
        """Build a label from a REST label payload.

        Raises:
            ValueError: If the payload is not a label object or has no name.
        """

        if not isinstance(data, dict):
            raise ValueError("Unexpected label response: not an object")
        payload: dict[str, Any] = data

        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Unexpected label response: missing name")

        color = payload.get("color")
        if not isinstance(color, str) or not color.strip():
            color = DEFAULT_LABEL_COLOR

        description = payload.get("description")
        if not isinstance(description, str):
            description = ""

        return cls(name=name, color=color.lstrip("#"), description=description)

    def to_payload(self) -> dict[str, str]:
        return {"name": self.name, "color": self.color, "description": self.description}


def label_names(labels: object) -> tuple[str, ...]:
    """Return label names from an issue's `labels` array, in order.

    Entries without a usable name are ignored. Names are not deduplicated.
    """

    if not isinstance(labels, list):
        return ()
    names: list[str] = []
    for item in labels:
        if isinstance(item, dict):
            name = item.get("name")
        else:
            name = item
        if isinstance(name, str) and name.strip():
            names.append(name)
    return tuple(names)
