class ParseFailedException(Exception):
    pass


class SizeLimitExceededException(ParseFailedException):
    def __init__(self, message, limit):
        super().__init__(message)
        self.limit = limit


class UnexpectedEndOfInputException(ParseFailedException):
    pass


class MalformedInputException(ParseFailedException):
    pass
