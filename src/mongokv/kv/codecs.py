"""
Value codecs: how each supported scalar type is written to and read from the
`value` field of a key-value document.

Adding a type means adding one ValueCodec subclass and registering it.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Type, Union

from bson.int64 import Int64

from mongokv.core.exceptions import ValidationError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class ValueCodec(ABC):
    """Encode, decode and type-check one scalar type."""

    #: Name used in error messages and by the CLI --type option
    name: str = ""
    #: Python type returned by decode()
    python_type: type = object

    @abstractmethod
    def encode(self, value: Any) -> Any:
        """Return the BSON-ready value. Raise ValidationError if it can't be stored."""
        ...

    @abstractmethod
    def holds(self, stored: Any) -> bool:
        """Whether a decoded BSON value is of this codec's type."""
        ...

    def decode(self, stored: Any) -> Any:
        return self.python_type(stored)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Int64Codec(ValueCodec):
    """
    64-bit signed integers, stored as BSON int64.

    bool is rejected on write and on read even though it subclasses int.
    BSON int32 values written by other clients are read as integers too.
    """

    name = "int8"
    python_type = int

    def encode(self, value: Any) -> Int64:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(
                f"value must be an integer, got {type(value).__name__}",
                context={"field": "value", "reason": "not_an_integer"},
            )
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValidationError(
                f"value {value} is out of int64 range",
                context={"field": "value", "reason": "out_of_range"},
            )
        return Int64(value)

    def holds(self, stored: Any) -> bool:
        # pymongo decodes BSON int64 to Int64 and int32 to a plain int
        return isinstance(stored, Int64)


class TextCodec(ValueCodec):
    """UTF-8 text, stored as a BSON string."""

    name = "text"
    python_type = str

    def encode(self, value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(
                f"value must be text, got {type(value).__name__}",
                context={"field": "value", "reason": "not_text"},
            )
        return value

    def holds(self, stored: Any) -> bool:
        return isinstance(stored, str)


INT64 = Int64Codec()
TEXT = TextCodec()

_BY_NAME: Dict[str, ValueCodec] = {
    "int8": INT64,
    "int": INT64,
    "text": TEXT,
    "str": TEXT,
}

_BY_TYPE: Dict[type, ValueCodec] = {
    int: INT64,
    Int64: INT64,
    str: TEXT,
}

ValueType = Union[ValueCodec, Type[Any], str]


def get_codec(value_type: ValueType) -> ValueCodec:
    """
    Resolve a codec from a codec instance, a Python type or a type name.

    Raises:
        ValidationError: unsupported type
    """
    if isinstance(value_type, ValueCodec):
        return value_type
    if isinstance(value_type, str):
        codec = _BY_NAME.get(value_type.lower())
    elif isinstance(value_type, type):
        codec = _BY_TYPE.get(value_type)
    else:
        codec = None
    if codec is None:
        raise ValidationError(
            f"unsupported value type: {value_type!r}",
            context={"field": "value_type", "supported": sorted(_BY_NAME)},
        )
    return codec


def codec_for_value(value: Any) -> ValueCodec:
    """Pick the codec matching a value's own type."""
    if isinstance(value, bool):
        raise ValidationError(
            "bool values are not supported",
            context={"field": "value", "reason": "unsupported_type"},
        )
    return get_codec(type(value))


def register_codec(codec: ValueCodec, *aliases: Union[str, type]) -> None:
    """Register an extra codec under its name and the given aliases."""
    _BY_NAME[codec.name] = codec
    for alias in aliases:
        if isinstance(alias, str):
            _BY_NAME[alias] = codec
        else:
            _BY_TYPE[alias] = codec
