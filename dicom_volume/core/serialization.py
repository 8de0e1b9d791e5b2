"""Serialization helpers for descriptor and report dataclasses.

Converts dataclasses into JSON-ready dictionaries so volume metadata can be
written next to a raw voxel dump or printed by the CLI.
"""

from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np


class SerializableMixin:
    """Mixin for dataclasses with JSON serialization support.

    Handles enums (by name), paths (as strings), numpy scalars (as Python
    numbers), tuples (as lists) and nested dataclasses. Subclasses can add
    derived fields by defining ``_custom_serialization(data) -> data``.

    Usage:
        @dataclass
        class Record(SerializableMixin):
            path: Path
            fmt: VoxelFormat

        Record(Path("/tmp/a.dcm"), VoxelFormat.FLOAT).to_dict()
    """

    def to_dict(self) -> dict[str, Any]:
        """Convert the dataclass to a JSON-serializable dictionary."""
        if not is_dataclass(self):
            raise TypeError(
                f"SerializableMixin can only be used with dataclasses, "
                f"got {type(self).__name__}"
            )

        data: dict[str, Any] = asdict(self)  # type: ignore[arg-type]
        serialized: dict[str, Any] = self._serialize_value(data)

        custom_method = getattr(self, "_custom_serialization", None)
        if custom_method is not None:
            serialized = custom_method(serialized)

        return serialized

    def _serialize_value(self, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.name
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, np.generic):
            return value.item()
        if isinstance(value, dict):
            return {k: self._serialize_value(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(item) for item in value]
        return value
