class ValidationError(Exception):
    pass


class MaxSizeValidator:
    """Rejects a part body once it grows beyond `max_size` bytes"""

    def __init__(self, max_size: int):
        self.so_far = 0
        self.max_size = max_size

    def reset(self):
        self.so_far = 0

    def __call__(self, chunk: bytes):
        self.so_far += len(chunk)

        if self.so_far > self.max_size:
            raise ValidationError(f"Size must not be greater than {self.max_size}")
