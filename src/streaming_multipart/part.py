import io
from email.message import EmailMessage
from email.utils import collapse_rfc2231_value
from typing import Optional

from streaming_multipart.headers import Headers


class Part(io.RawIOBase):
    """
    One part of a multipart body.

    The body is read lazily from the owning reader. Only the reader's current
    part can read: once the reader moved on to another part, reads on this one
    return end-of-data.
    """

    def __init__(self, reader, headers: Headers, index: int):
        super().__init__()

        self.headers = headers
        self.index = index

        self._reader = reader
        self._buffer = bytearray()
        self._drained = False
        self._disposition: Optional[EmailMessage] = None

    def readable(self):
        return True

    def readinto(self, buffer) -> int:
        view = memoryview(buffer).cast("B")
        size = len(view)

        if not size or not self._reader.is_current(self):
            return 0

        # buffered bytes are not served once the reader has failed
        self._reader.raise_stored_error()

        # short reads are fine, only block for more when nothing is buffered
        while not self._buffer and not self._drained:
            chunk = self._reader.read_body_chunk()
            if chunk is None:
                self._drained = True
            else:
                self._buffer += chunk

        count = min(size, len(self._buffer))
        view[:count] = self._buffer[:count]
        del self._buffer[:count]

        return count

    @property
    def drained(self) -> bool:
        """Whether the whole body was pulled from the stream"""
        return self._drained

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")

    @property
    def form_name(self) -> str:
        """
        Value of the `name` parameter of a `form-data` Content-Disposition
        """

        message = self._content_disposition()

        if message.get_content_disposition() != "form-data":
            return ""

        return self._disposition_param(message, "name")

    @property
    def file_name(self) -> str:
        """
        Value of the `filename` parameter of the Content-Disposition header.

        Please note that this value comes directly from the user input and is
        not sanitized, so be careful in using it directly.
        """

        return self._disposition_param(self._content_disposition(), "filename")

    def _content_disposition(self) -> EmailMessage:
        if self._disposition is None:
            message = EmailMessage()

            value = self.headers.get("Content-Disposition")
            if value:
                message["content-disposition"] = value

            self._disposition = message

        return self._disposition

    @staticmethod
    def _disposition_param(message: EmailMessage, name: str) -> str:
        value = message.get_param(name, header="content-disposition")

        if not value:
            return ""

        # RFC 2231 encoded values come back as (charset, language, value)
        if isinstance(value, tuple):
            return collapse_rfc2231_value(value)

        return value

    def __repr__(self):
        return "<Part {} name={!r} filename={!r}>".format(
            self.index, self.form_name, self.file_name
        )
