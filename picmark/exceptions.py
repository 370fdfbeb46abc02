"""Custom exceptions for picmark."""

from picmark.core.task import ErrorKind


class PicmarkError(Exception):
    """Base exception class for picmark."""

    pass


class TaskError(PicmarkError):
    """A failure that aborts a single file task.

    The ``kind`` is reported to the sink as the ``error`` of the
    ``aborted`` event.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN_ERROR

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        if kind is not None:
            self.kind = kind
        super().__init__(message)


class NoLocalImagesError(TaskError):
    """The document has no local image references to upload."""

    kind = ErrorKind.NO_LOCAL_IMAGES

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(f"No local images found in {file_path}")


class UploadAddressError(TaskError):
    """The upload endpoint address is malformed."""

    kind = ErrorKind.UPLOAD_ADDRESS_INVALID

    def __init__(self, endpoint: str, cause: Exception | None = None) -> None:
        self.endpoint = endpoint
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Invalid upload address {endpoint!r}{detail}")


class ConfigurationError(PicmarkError):
    """Configuration error."""

    pass
