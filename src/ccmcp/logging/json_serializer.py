from typing import Any, Dict, Iterable, Set
from datetime import datetime, date
from pathlib import Path
from enum import Enum
import dataclasses


class JSONSerializer:
    """
    Serializes the data attached to log events so it can be written as a JSON line.
    Falls back to string representations rather than failing a log call.
    """

    def __init__(self):
        # Containers already visited, to stop on reference cycles
        self._processed_objects: Set[int] = set()

    def serialize(self, obj: Any) -> Any:
        """Main entry point for serialization."""
        self._processed_objects.clear()
        return self._serialize_object(obj)

    def _serialize_object(self, obj: Any) -> Any:
        if obj is None:
            return None

        if isinstance(obj, (str, int, float, bool)):
            return obj

        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Path):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value

        obj_id = id(obj)
        if obj_id in self._processed_objects:
            return str(obj)
        self._processed_objects.add(obj_id)

        try:
            # Pydantic models (server definitions, settings)
            if hasattr(obj, "model_dump"):
                return self._serialize_object(obj.model_dump(by_alias=True, exclude_none=True))

            if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
                return self._serialize_object(dataclasses.asdict(obj))

            if isinstance(obj, Dict):
                return {str(key): self._serialize_object(value) for key, value in obj.items()}

            # Lists, tuples, sets and named tuples
            if isinstance(obj, Iterable) and not isinstance(obj, bytes):
                return [self._serialize_object(item) for item in obj]

            return str(obj)

        except Exception as e:
            return f"<unserializable: {type(obj).__name__}, error: {str(e)}>"

    def __call__(self, obj: Any) -> Any:
        """Make the serializer callable."""
        return self.serialize(obj)
