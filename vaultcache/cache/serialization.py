"""
vaultcache — Value Codec

JSON codec used by the facade when serialization is enabled. Encoding goes
through pydantic-core, so datetimes, UUIDs, sets and pydantic models are
accepted; they come back as their JSON equivalents.
"""

from typing import Any

from pydantic_core import PydanticSerializationError, from_json, to_json

from ..errors import SerializationError


def dumps(value: Any) -> str:
    """Serialize a value to its stored string form."""
    try:
        return to_json(value).decode("utf-8")
    except PydanticSerializationError as e:
        raise SerializationError(
            f"Value of type {type(value).__name__} is not serializable: {e}",
            details={"value_type": type(value).__name__},
        ) from e


def loads(data: str | bytes) -> Any:
    """Deserialize a stored string back into a value."""
    if not isinstance(data, (str, bytes, bytearray)):
        raise SerializationError(
            f"Stored value of type {type(data).__name__} is not a serialized payload",
            details={"data_type": type(data).__name__},
        )

    try:
        return from_json(data)
    except ValueError as e:
        raise SerializationError(
            f"Stored value could not be deserialized: {e}",
            details={"data_type": type(data).__name__},
        ) from e
