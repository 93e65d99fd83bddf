import logging
from enum import Enum
from typing import Iterator, Optional, Union

from streaming_multipart.delimiter import Delimiter, DelimiterKind
from streaming_multipart.exceptions import (
    ParseFailedException,
    UnexpectedEndOfInputException,
)
from streaming_multipart.headers import (
    DEFAULT_ENCODING,
    MAX_HEADER_COUNT,
    MAX_HEADER_SIZE,
    read_header_block,
)
from streaming_multipart.lines import (
    DEFAULT_CHUNK_SIZE,
    MAX_LINE_LENGTH,
    LineEnding,
    LineScanner,
)
from streaming_multipart.part import Part


logger = logging.getLogger(__name__)


class ReaderState(Enum):
    PREAMBLE = 0
    HEADERS = 1
    BODY = 2
    TERMINAL = 3
    EXHAUSTED = 4


class MultipartReader:
    """
    Pull parser for multipart bodies.

    Call `next_part` (or iterate over the reader) to get the parts one at a
    time. Requesting a part discards whatever is left unread of the previous
    one. The first parse error is stored and raised again by every later call.
    """

    def __init__(
        self,
        source,
        boundary: Union[str, bytes],
        max_line_length: int = MAX_LINE_LENGTH,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_header_count: int = MAX_HEADER_COUNT,
        max_header_size: int = MAX_HEADER_SIZE,
        header_encoding: str = DEFAULT_ENCODING,
    ):
        self._delimiter = Delimiter(boundary)
        self._scanner = LineScanner(
            source, max_line_length=max_line_length, chunk_size=chunk_size
        )

        self.max_header_count = max_header_count
        self.max_header_size = max_header_size
        self.header_encoding = header_encoding

        self.state = ReaderState.PREAMBLE
        self.parts_read = 0

        self._current: Optional[Part] = None
        # terminator of the last body line, emitted only if more body follows
        self._pending = b""
        self._error: Optional[ParseFailedException] = None

    @property
    def boundary(self) -> bytes:
        return self._delimiter.boundary

    @property
    def consumed(self) -> int:
        """Number of bytes read from the source so far"""
        return self._scanner.consumed

    def next_part(self) -> Optional[Part]:
        """
        Return the next part, or None when there are no more parts
        """

        self.raise_stored_error()

        try:
            return self._next_part()
        except ParseFailedException as exc:
            self._fail(exc)
            raise

    def __iter__(self) -> Iterator[Part]:
        while True:
            part = self.next_part()
            if part is None:
                return
            yield part

    def is_current(self, part: Part) -> bool:
        return self._current is part

    def read_body_chunk(self) -> Optional[bytes]:
        """
        Return the next piece of the current part's body, or None once its
        closing delimiter has been consumed
        """

        if self.state is not ReaderState.BODY:
            return None

        self.raise_stored_error()

        try:
            return self._read_body_chunk()
        except ParseFailedException as exc:
            self._fail(exc)
            raise

    def _next_part(self) -> Optional[Part]:
        if self.state is ReaderState.BODY:
            self._drain()

        if self.state is ReaderState.PREAMBLE:
            self._skip_preamble()

        if self.state in (ReaderState.TERMINAL, ReaderState.EXHAUSTED):
            if self.state is ReaderState.TERMINAL:
                logger.debug("Read %d part(s), ignoring the epilogue", self.parts_read)

            self.state = ReaderState.EXHAUSTED
            self._current = None
            return None

        headers = read_header_block(
            self._scanner,
            delimiter=self._delimiter,
            max_header_count=self.max_header_count,
            max_header_size=self.max_header_size,
            encoding=self.header_encoding,
        )

        part = Part(self, headers, self.parts_read)
        self.parts_read += 1

        self._current = part
        self._pending = b""
        self.state = ReaderState.BODY

        logger.debug("Starting part %d with headers %r", part.index, headers)

        return part

    def _skip_preamble(self):
        while True:
            line = self._scanner.next_line()

            if line is None:
                logger.warning(
                    "Stream ended before any delimiter for boundary %r",
                    self.boundary,
                )
                self.state = ReaderState.EXHAUSTED
                return

            kind = self._delimiter.match(line)

            if kind is DelimiterKind.PART:
                self.state = ReaderState.HEADERS
                return

            if kind is DelimiterKind.FINAL:
                logger.debug("Final delimiter found before any part")
                self.state = ReaderState.TERMINAL
                return

    def _drain(self):
        while self._read_body_chunk() is not None:
            pass

    def _read_body_chunk(self) -> Optional[bytes]:
        if self.state is not ReaderState.BODY:
            return None

        line = self._scanner.next_line()

        if line is None:
            raise UnexpectedEndOfInputException(
                f"Stream ended inside the body of part {self.parts_read - 1}"
            )

        kind = self._delimiter.match(line)

        if kind is not DelimiterKind.NONE:
            # the pending terminator belongs to the delimiter line
            self._pending = b""

            if not line.terminated:
                logger.warning("Unterminated delimiter line at the end of the stream")

            if kind is DelimiterKind.FINAL:
                self.state = ReaderState.TERMINAL
            else:
                self.state = ReaderState.HEADERS

            return None

        if line.ending is LineEnding.NONE:
            raise UnexpectedEndOfInputException(
                f"Stream ended inside the body of part {self.parts_read - 1}"
            )

        chunk = self._pending + line.content
        self._pending = line.terminator

        return chunk

    def raise_stored_error(self):
        if self._error is not None:
            raise self._error

    def _fail(self, exc: ParseFailedException):
        if self._error is None:
            logger.debug("Multipart parsing failed: %s", exc)
            self._error = exc
