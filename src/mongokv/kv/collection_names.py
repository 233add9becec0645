"""
Collection name validation.
A name must be non-empty and its UTF-8 encoding no longer than the configured
bound in bytes.
"""

from typing import Any

from mongokv.core.exceptions import ValidationError
from mongokv.core.secure_config import MAX_COLLECTION_NAME_LENGTH


class CollectionName(str):
    """
    A collection name that has passed validation.

    Only build it through validate(); the constructor does not check anything.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"CollectionName({str.__repr__(self)})"

    @classmethod
    def validate(cls, name: Any, max_length: int = MAX_COLLECTION_NAME_LENGTH) -> "CollectionName":
        """
        Validate a raw name.

        Args:
            name: Raw collection name
            max_length: Inclusive upper bound on the UTF-8 byte length

        Returns:
            The validated name

        Raises:
            ValidationError: name is not a string, is empty or is too long
        """
        if isinstance(name, cls):
            raw = str(name)
        elif isinstance(name, str):
            raw = name
        else:
            raise ValidationError(
                f"collection name must be a string, got {type(name).__name__}",
                context={"field": "collection_name", "reason": "not_a_string"},
            )

        # Bound on the UTF-8 byte length, like MongoDB namespace limits
        if not raw or len(raw.encode("utf-8")) > max_length:
            raise ValidationError(
                f"collection name must be non empty and with {max_length} characters max",
                context={
                    "field": "collection_name",
                    "value": raw,
                    "reason": "empty" if not raw else "too_long",
                    "max_length": max_length,
                },
            )

        return cls(raw)


def validate_collection_name(
    name: Any, max_length: int = MAX_COLLECTION_NAME_LENGTH
) -> CollectionName:
    """Convenience alias for CollectionName.validate()."""
    return CollectionName.validate(name, max_length)
