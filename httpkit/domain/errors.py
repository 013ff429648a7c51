"""Error types shared by static delivery and validation."""


class HttpError(Exception):
    """Base error carrying the HTTP status a caller should answer with."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class BadRequest(HttpError):
    """Client-caused failure answered with 400."""

    def __init__(self, title: str, detail: str = ""):
        message = f"{title}: {detail}" if detail else title
        super().__init__(400, message)
        self.title = title
        self.detail = detail


class IllegalPath(BadRequest):
    """Raised when a requested path resolves outside the sandbox root."""

    def __init__(self):
        super().__init__("Illegal path")


class FileUnavailable(BadRequest):
    """Raised when the requested file cannot be stat'ed."""

    def __init__(self, detail: str = ""):
        super().__init__("Unable to open file", detail)


class IsADirectory(BadRequest):
    """Raised when the requested path names a directory."""

    def __init__(self):
        super().__init__("File not found")


class ValidationError(HttpError):
    """Raised by validate() when a value fails its predicate."""


class StreamFailure(HttpError):
    """Raised when the body cannot be streamed after headers were sent."""

    def __init__(self, detail: str):
        super().__init__(500, f"Stream failure: {detail}")
        self.detail = detail
