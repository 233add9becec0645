import pytest

from mongokv.core.exceptions import ValidationError
from mongokv.core.secure_config import MAX_COLLECTION_NAME_LENGTH
from mongokv.kv.collection_names import CollectionName, validate_collection_name


def test_name_at_bound_is_accepted():
    name = "n" * MAX_COLLECTION_NAME_LENGTH
    validated = validate_collection_name(name)
    assert validated == name
    assert isinstance(validated, CollectionName)


def test_name_one_past_bound_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        validate_collection_name("n" * (MAX_COLLECTION_NAME_LENGTH + 1))
    assert excinfo.value.context["reason"] == "too_long"


def test_empty_name_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        validate_collection_name("")
    assert excinfo.value.context["reason"] == "empty"


def test_bound_is_pinned_to_fifteen():
    assert MAX_COLLECTION_NAME_LENGTH == 15
    validate_collection_name("a" * 15)
    with pytest.raises(ValidationError):
        validate_collection_name("a" * 16)


def test_custom_bound():
    assert CollectionName.validate("abcd", max_length=4) == "abcd"
    with pytest.raises(ValidationError, match="4 characters max"):
        CollectionName.validate("abcde", max_length=4)


def test_no_character_restrictions():
    for name in ("with space", "dots.and-dash", "ünïcødé", "$weird"):
        assert validate_collection_name(name) == name


def test_non_string_is_rejected():
    with pytest.raises(ValidationError, match="must be a string"):
        validate_collection_name(42)


def test_revalidating_a_validated_name_returns_equal_name():
    first = validate_collection_name("counters")
    assert validate_collection_name(first) == first


def test_bound_counts_utf8_bytes():
    # Each "é" is two bytes in UTF-8
    assert validate_collection_name("é" * 7 + "a") == "é" * 7 + "a"
    with pytest.raises(ValidationError) as excinfo:
        validate_collection_name("é" * 8)
    assert excinfo.value.context["reason"] == "too_long"
    with pytest.raises(ValidationError):
        validate_collection_name("é" * 15)
