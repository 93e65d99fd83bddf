import pytest

from streaming_multipart.validators import MaxSizeValidator, ValidationError


def test_max_size_validator_empty_input():
    validator = MaxSizeValidator(0)

    with pytest.raises(ValidationError):
        validator(b"x")


def test_max_size_validator_normal():
    validator = MaxSizeValidator(5)

    for char in b"hello":
        validator(bytes([char]))

    with pytest.raises(ValidationError):
        validator(b"x")


def test_max_size_validator_reset():
    validator = MaxSizeValidator(5)

    validator(b"hello")
    validator.reset()
    validator(b"world")

    assert validator.so_far == 5
