from enum import Enum
from typing import Union

from streaming_multipart.lines import Line


class DelimiterKind(Enum):
    NONE = 0
    PART = 1
    FINAL = 2


def only_horizontal_whitespace(data: bytes) -> bool:
    return not data.strip(b" \t")


class Delimiter(object):
    """Recognizes the delimiter lines built from a boundary token"""

    def __init__(self, boundary: Union[str, bytes]):
        if isinstance(boundary, str):
            boundary = boundary.encode("utf-8")

        if not isinstance(boundary, bytes):
            raise TypeError("Only str or bytes boundaries allowed")

        if len(boundary) < 1:
            raise ValueError("Empty boundaries not allowed")

        self.boundary = boundary
        self.dash_boundary = b"--" + boundary

    def match(self, line: Line) -> DelimiterKind:
        content = line.content

        if not content.startswith(self.dash_boundary):
            return DelimiterKind.NONE

        rest = content[len(self.dash_boundary):]
        kind = DelimiterKind.PART

        if rest.startswith(b"--"):
            rest = rest[2:]
            kind = DelimiterKind.FINAL

        if not only_horizontal_whitespace(rest):
            return DelimiterKind.NONE

        return kind

    def is_delimiter(self, line: Line) -> bool:
        return self.match(line) is not DelimiterKind.NONE
