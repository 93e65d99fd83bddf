import logging
from email.message import EmailMessage
from typing import Dict, List, Mapping

from streaming_multipart.exceptions import ParseFailedException
from streaming_multipart.lines import DEFAULT_CHUNK_SIZE
from streaming_multipart.part import Part
from streaming_multipart.reader import MultipartReader
from streaming_multipart.targets import BaseTarget


logger = logging.getLogger(__name__)


class UnexpectedPartException(ParseFailedException):
    def __init__(self, message, part_name):
        super().__init__(message)
        self.part_name = part_name


def parse_content_boundary(headers: Mapping[str, str]) -> bytes:
    """
    Return the content boundary value as extracted from the Content-Type header
    """

    content_type = None

    for key in headers.keys():
        if key.lower() == "content-type":
            content_type = headers.get(key)
            break

    if not content_type:
        raise ParseFailedException("Missing Content-Type header")

    message = EmailMessage()
    message["content-type"] = content_type

    if message.get_content_type() != "multipart/form-data":
        raise ParseFailedException("Content-Type is not multipart/form-data")

    boundary = message.get_boundary()
    if not boundary:
        raise ParseFailedException("Boundary not found")

    return boundary.encode("utf-8")


class FormDataParser:
    """
    Reads a multipart/form-data stream and hands every part to the targets
    registered under its form name
    """

    def __init__(
        self,
        source,
        headers: Mapping[str, str],
        strict: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        **reader_options,
    ):
        self.headers = headers
        self.strict = strict
        self.chunk_size = chunk_size

        self._reader = MultipartReader(
            source, parse_content_boundary(headers), **reader_options
        )
        self._targets: Dict[str, List[BaseTarget]] = {}

        self._running = False

    @property
    def reader(self) -> MultipartReader:
        return self._reader

    def register(self, name: str, target: BaseTarget):
        """
        Register a target for the given part name
        """

        if self._running:
            raise ParseFailedException(
                "Registering parts not allowed while parser is running"
            )

        self._targets.setdefault(name, []).append(target)

    def parse(self):
        """
        Read the whole stream, feeding each part to its targets
        """

        self._running = True

        for part in self._reader:
            targets = self._targets.get(part.form_name)

            if not targets:
                if self.strict:
                    raise UnexpectedPartException(
                        f"parsing unexpected part '{part.form_name}' in strict mode",
                        part.form_name,
                    )

                logger.debug("Skipping unregistered part %r", part.form_name)
                continue

            self._deliver(part, targets)

    def _deliver(self, part: Part, targets: List[BaseTarget]):
        for target in targets:
            target.set_part(part)
            target.start()

        try:
            while True:
                chunk = part.read(self.chunk_size)
                if not chunk:
                    break

                for target in targets:
                    target.data_received(chunk)
        finally:
            for target in targets:
                target.finish()
