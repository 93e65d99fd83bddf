from io import BytesIO

import pytest
from requests_toolbelt import MultipartEncoder

from streaming_multipart import (
    FormDataParser,
    MalformedInputException,
    ParseFailedException,
    SizeLimitExceededException,
    UnexpectedEndOfInputException,
    UnexpectedPartException,
)
from streaming_multipart.targets import ValueTarget


class CustomTarget(ValueTarget):
    def data_received(self, chunk):
        raise ValueError("CustomTarget exception")


def test_hierarchy():
    for cls in (
        MalformedInputException,
        SizeLimitExceededException,
        UnexpectedEndOfInputException,
        UnexpectedPartException,
    ):
        assert issubclass(cls, ParseFailedException)


def test_custom_target_exception():
    target = CustomTarget()

    encoder = MultipartEncoder(fields={"value": "hello world"})

    parser = FormDataParser(
        BytesIO(encoder.to_string()), headers={"Content-Type": encoder.content_type}
    )
    parser.register("value", target)

    with pytest.raises(ValueError):
        parser.parse()


def test_unexpected_part_exception():
    target = ValueTarget()

    encoder = MultipartEncoder(fields={"value": "hello world", "extra": "field"})

    parser = FormDataParser(
        BytesIO(encoder.to_string()),
        headers={"Content-Type": encoder.content_type},
        strict=True,
    )
    parser.register("value", target)

    with pytest.raises(UnexpectedPartException) as exc_info:
        parser.parse()

    assert exc_info.value.part_name == "extra"
    assert target.value == b"hello world"


def test_size_limit_exception():
    parser = FormDataParser(
        BytesIO(b"x" * 100),
        headers={"Content-Type": "multipart/form-data; boundary=1234"},
        max_line_length=10,
    )

    with pytest.raises(SizeLimitExceededException) as exc_info:
        parser.parse()

    assert exc_info.value.limit == 10
