import hashlib
from pathlib import Path
from typing import Callable, List, Optional, Union

import smart_open  # type: ignore

from streaming_multipart.headers import Headers


class BaseTarget:
    """
    Targets determine what to do with the body of a part once the parser
    reads it. Any new Target should inherit from this base class and override
    the `on_data_received` method.

    Attributes:
        multipart_filename: the name of the file advertised by the user,
            extracted from the `Content-Disposition` header. Please note
            that this value comes directly from the user input and is not
            sanitized, so be careful in using it directly.
        multipart_content_type: MIME Content-Type of the part, extracted from
            its `Content-Type` header
        multipart_headers: all the headers of the part
    """

    def __init__(self, validator: Optional[Callable] = None):
        self.multipart_filename: Optional[str] = None
        self.multipart_content_type: Optional[str] = None
        self.multipart_headers: Optional[Headers] = None

        self._started = False
        self._finished = False
        self._validator = validator

    def _validate(self, chunk: bytes):
        if self._validator:
            self._validator(chunk)

    def set_part(self, part):
        self.set_multipart_filename(part.file_name or None)
        self.set_multipart_content_type(part.content_type or None)
        self.multipart_headers = part.headers

    def start(self):
        self._started = True

        reset = getattr(self._validator, "reset", None)
        if reset:
            reset()

        self.on_start()

    def on_start(self):
        pass

    def data_received(self, chunk: bytes):
        self._validate(chunk)
        self.on_data_received(chunk)

    def on_data_received(self, chunk: bytes):
        raise NotImplementedError()

    def finish(self):
        self.on_finish()
        self._finished = True

    def on_finish(self):
        pass

    def set_multipart_filename(self, filename: Optional[str]):
        self.multipart_filename = filename

    def set_multipart_content_type(self, content_type: Optional[str]):
        self.multipart_content_type = content_type


class NullTarget(BaseTarget):
    """
    NullTarget ignores whatever input is passed in.
    """

    def on_data_received(self, chunk: bytes):
        pass


class ValueTarget(BaseTarget):
    """
    ValueTarget stores the input in an in-memory list of bytes.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self._values: List[bytes] = []

    def on_data_received(self, chunk: bytes):
        self._values.append(chunk)

    @property
    def value(self):
        return b"".join(self._values)


class ListTarget(BaseTarget):
    """
    ListTarget collects one value per part, for form names that are
    submitted more than once.
    """

    def __init__(self, _type=bytes, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self._temp_value: List[bytes] = []
        self._values: list = []
        self._type = _type

    def on_data_received(self, chunk: bytes):
        self._temp_value.append(chunk)

    def on_finish(self):
        value = b"".join(self._temp_value)
        self._temp_value = []

        if self._type is str:
            value = value.decode("UTF-8")
        elif self._type is not bytes:
            value = self._type(value)

        self._values.append(value)

    @property
    def value(self):
        return self._values

    @property
    def finished(self):
        return self._finished


class FileTarget(BaseTarget):
    """
    FileTarget writes (streams) the input to an on-disk file.
    """

    def __init__(
        self,
        filename: Union[str, Path, Callable],
        allow_overwrite: bool = True,
        *args,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)

        self.filename = filename() if callable(filename) else filename

        self._mode = "wb" if allow_overwrite else "xb"
        self._fd = None

    def on_start(self):
        self._fd = open(self.filename, self._mode)

    def on_data_received(self, chunk: bytes):
        if self._fd:
            self._fd.write(chunk)

    def on_finish(self):
        if self._fd:
            self._fd.close()


class DirectoryTarget(BaseTarget):
    """
    DirectoryTarget writes (streams) every file part to its own file in an
    on-disk directory, named after the advertised filename.
    """

    def __init__(
        self,
        directory_path: Union[str, Path, Callable],
        allow_overwrite: bool = True,
        *args,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)

        self.directory_path = (
            directory_path() if callable(directory_path) else directory_path
        )

        self._mode = "wb" if allow_overwrite else "xb"
        self._fd = None
        self.multipart_filenames: List[Optional[str]] = []
        self.multipart_content_types: List[Optional[str]] = []

    def on_start(self):
        # parts without a filename are not files
        if not self.multipart_filename:
            return

        # only keep the base name to prevent path traversal
        self.multipart_filename = Path(self.multipart_filename).name
        if self.multipart_filename in ("", ".", ".."):
            return

        self._fd = open(Path(self.directory_path) / self.multipart_filename, self._mode)

    def on_data_received(self, chunk: bytes):
        if self._fd:
            self._fd.write(chunk)

    def on_finish(self):
        self.multipart_filenames.append(self.multipart_filename)
        self.multipart_content_types.append(self.multipart_content_type)

        if self._fd:
            self._fd.close()
            self._fd = None


class SHA256Target(BaseTarget):
    """
    SHA256Target calculates the SHA256 hash of the given input.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self._hash = hashlib.sha256()

    def on_data_received(self, chunk: bytes):
        self._hash.update(chunk)

    @property
    def value(self):
        return self._hash.hexdigest()


class SmartOpenTarget(BaseTarget):
    """
    SmartOpenTarget streams the input to any location smart_open can write
    to (local paths, S3, GCS, HTTP, ...).
    """

    def __init__(
        self,
        file_path: Union[str, Callable],
        mode: str = "wb",
        transport_params=None,
        **kwargs,
    ):
        super().__init__(**kwargs)

        self._file_path = file_path() if callable(file_path) else file_path
        self._mode = mode
        self._transport_params = transport_params
        self._fd = None

    def on_start(self):
        self._fd = smart_open.open(
            self._file_path,
            self._mode,
            transport_params=self._transport_params,
        )

    def on_data_received(self, chunk: bytes):
        if self._fd:
            self._fd.write(chunk)

    def on_finish(self):
        if self._fd:
            self._fd.close()
