from enum import Enum
from typing import Callable, Iterable, NamedTuple, Optional

from streaming_multipart.exceptions import SizeLimitExceededException


MAX_LINE_LENGTH = 1 << 20
DEFAULT_CHUNK_SIZE = 1 << 16


class LineEnding(Enum):
    CRLF = b"\r\n"
    LF = b"\n"
    NONE = b""


class Line(NamedTuple):
    content: bytes
    ending: LineEnding

    @classmethod
    def from_bytes(cls, data: bytes) -> "Line":
        if data.endswith(b"\r\n"):
            return cls(data[:-2], LineEnding.CRLF)

        if data.endswith(b"\n"):
            return cls(data[:-1], LineEnding.LF)

        return cls(data, LineEnding.NONE)

    @property
    def terminator(self) -> bytes:
        return self.ending.value

    @property
    def terminated(self) -> bool:
        return self.ending is not LineEnding.NONE

    @property
    def blank(self) -> bool:
        return not self.content and self.terminated


class _ChunkSource:
    """
    Adapts an iterable of byte chunks to the ``read(size)`` interface, handing
    out at most ``size`` bytes per call
    """

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks = iter(chunks)
        self._leftover = memoryview(b"")

    def read(self, size: int) -> bytes:
        while not self._leftover:
            chunk = next(self._chunks, None)
            if chunk is None:
                return b""
            self._leftover = memoryview(chunk)

        data = bytes(self._leftover[:size])
        self._leftover = self._leftover[size:]
        return data


def _read_function(source) -> Callable[[int], bytes]:
    read = getattr(source, "read", None)
    if callable(read):
        return read

    if isinstance(source, (bytes, bytearray, str)):
        raise TypeError("Expected a readable stream or an iterable of chunks")

    return _ChunkSource(source).read


class LineScanner:
    """
    Splits a forward-only byte source into lines.

    A line runs up to and including ``\\n`` (or up to the end of the stream).
    At most ``max_line_length`` bytes are ever buffered for a single line;
    the source is read in chunks no larger than what keeps the buffer within
    that bound, so a source that never sends a line break fails after
    consuming little more than ``max_line_length`` bytes.
    """

    def __init__(
        self,
        source,
        max_line_length: int = MAX_LINE_LENGTH,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if max_line_length < 1:
            raise ValueError("max_line_length must be positive")

        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")

        self._read = _read_function(source)
        self.max_line_length = max_line_length
        self.chunk_size = chunk_size

        self._buffer = bytearray()
        # start of the unconsumed data in the buffer
        self._start = 0
        # everything in [_start, _scanned) is known to contain no b"\n"
        self._scanned = 0
        self._eof = False

        self.consumed = 0

    @property
    def at_eof(self) -> bool:
        return self._eof and self._start == len(self._buffer)

    def next_line(self) -> Optional[Line]:
        """
        Return the next line, or None once the stream ended cleanly between
        two lines
        """

        while True:
            index = self._buffer.find(b"\n", self._scanned)

            if index != -1:
                end = index + 1
                self._check_length(end - self._start)

                data = bytes(self._buffer[self._start:end])
                self._start = self._scanned = end
                return Line.from_bytes(data)

            self._scanned = len(self._buffer)
            self._check_length(self._scanned - self._start)

            if self._eof:
                if self._start == len(self._buffer):
                    return None

                data = bytes(self._buffer[self._start:])
                self._start = self._scanned = len(self._buffer)
                return Line.from_bytes(data)

            self._fill()

    def __iter__(self):
        return self

    def __next__(self) -> Line:
        line = self.next_line()
        if line is None:
            raise StopIteration
        return line

    def _check_length(self, length: int):
        if length > self.max_line_length:
            raise SizeLimitExceededException(
                f"Line exceeds the maximum length of {self.max_line_length} bytes",
                self.max_line_length,
            )

    def _fill(self):
        if self._start:
            del self._buffer[: self._start]
            self._scanned -= self._start
            self._start = 0

        # never buffer more than one byte past the limit
        size = min(self.chunk_size, self.max_line_length + 1 - len(self._buffer))

        chunk = self._read(size)
        if not chunk:
            self._eof = True
            return

        if len(chunk) > size:
            raise ValueError(
                f"Source returned {len(chunk)} bytes when {size} were requested"
            )

        self.consumed += len(chunk)
        self._buffer += chunk
