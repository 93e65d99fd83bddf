from collections.abc import Mapping
from typing import Dict, Iterator, List, Optional, Tuple

from streaming_multipart.exceptions import (
    MalformedInputException,
    SizeLimitExceededException,
    UnexpectedEndOfInputException,
)
from streaming_multipart.delimiter import Delimiter
from streaming_multipart.lines import LineScanner


MAX_HEADER_COUNT = 1000
MAX_HEADER_SIZE = 1 << 20
DEFAULT_ENCODING = "utf-8"


class Headers(Mapping):
    """
    Case-insensitive header mapping.

    Looking up a name returns all of its values joined with ", "; use
    `get_all` for the individual values. Names keep the spelling and order of
    their first occurrence.
    """

    def __init__(self, items: Optional[List[Tuple[str, str]]] = None):
        self._entries: Dict[str, Tuple[str, List[str]]] = {}

        for name, value in items or ():
            self.add(name, value)

    def add(self, name: str, value: str):
        key = name.lower()

        if key in self._entries:
            self._entries[key][1].append(value)
        else:
            self._entries[key] = (name, [value])

    def get_all(self, name: str) -> List[str]:
        entry = self._entries.get(name.lower())
        return list(entry[1]) if entry else []

    def __getitem__(self, name: str) -> str:
        return ", ".join(self._entries[name.lower()][1])

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self):
        return "Headers({!r})".format(dict(self.items()))


def _split_header(text: str) -> Tuple[str, str]:
    name, sep, value = text.partition(":")

    if not sep:
        raise MalformedInputException(f"Malformed header line: {text!r}")

    if not name or name != name.strip() or " " in name or "\t" in name:
        raise MalformedInputException(f"Malformed header name: {name!r}")

    return name, value.strip(" \t")


def _join_value(name: str, pieces: List[str]) -> str:
    value = " ".join(pieces)

    # str.splitlines also breaks on \r, \x0b, \x0c, \x1c-\x1e, \x85, U+2028/9
    if len(value.splitlines()) > 1:
        raise MalformedInputException(f"Line break inside the value of {name!r}")

    return value


def read_header_block(
    scanner: LineScanner,
    delimiter: Optional[Delimiter] = None,
    max_header_count: int = MAX_HEADER_COUNT,
    max_header_size: int = MAX_HEADER_SIZE,
    encoding: str = DEFAULT_ENCODING,
) -> Headers:
    """
    Read "Name: value" lines up to and including the blank line that ends the
    block. Lines starting with a space or a tab continue the previous value.

    The block may hold at most `max_header_count` headers and
    `max_header_size` bytes, folded lines and terminators included.
    """

    items: List[Tuple[str, List[str]]] = []
    size = 0

    while True:
        line = scanner.next_line()

        if line is None or not line.terminated:
            raise UnexpectedEndOfInputException("Stream ended inside a header block")

        size += len(line.content) + len(line.terminator)
        if size > max_header_size:
            raise SizeLimitExceededException(
                f"Header block exceeds {max_header_size} bytes", max_header_size
            )

        if not line.content:
            return Headers(
                [(name, _join_value(name, pieces)) for name, pieces in items]
            )

        if delimiter is not None and delimiter.is_delimiter(line):
            raise MalformedInputException("Delimiter line inside a header block")

        text = line.content.decode(encoding, "replace")

        if text[0] in " \t":
            if not items:
                raise MalformedInputException(
                    f"Continuation line without a header: {text!r}"
                )

            folded = text.strip(" \t")
            if folded:
                items[-1][1].append(folded)
            continue

        if len(items) >= max_header_count:
            raise SizeLimitExceededException(
                f"Header block has more than {max_header_count} headers",
                max_header_count,
            )

        name, value = _split_header(text)
        items.append((name, [value] if value else []))
