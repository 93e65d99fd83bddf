from streaming_multipart.exceptions import (  # noqa: F401
    MalformedInputException,
    ParseFailedException,
    SizeLimitExceededException,
    UnexpectedEndOfInputException,
)
from streaming_multipart.headers import Headers  # noqa: F401
from streaming_multipart.lines import Line, LineEnding, LineScanner  # noqa: F401
from streaming_multipart.parser import (  # noqa: F401
    FormDataParser,
    UnexpectedPartException,
    parse_content_boundary,
)
from streaming_multipart.part import Part  # noqa: F401
from streaming_multipart.reader import MultipartReader, ReaderState  # noqa: F401
