"""Domain exceptions. Routes translate these into HTTP responses."""


class FileboxError(Exception):
    """Base class for errors raised by the storage services."""
    pass


class FileTooLargeError(FileboxError):
    """An uploaded part went over the configured per-file byte limit."""

    def __init__(self, limit: int, original_name: str = ""):
        super().__init__(f"File too large. Max {limit} bytes.")
        self.limit = limit
        self.original_name = original_name


class TooManyFilesError(FileboxError):
    """More parts were sent in one upload than the configured maximum."""

    def __init__(self, limit: int):
        super().__init__(f"Too many files. Max {limit} per upload.")
        self.limit = limit
