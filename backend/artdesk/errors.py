from typing import List, Optional


class ArtdeskError(Exception):
    """Base class for every failure raised by the data layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(ArtdeskError):
    """The request never produced a response (connection refused, timeout, DNS)."""


class HTTPStatusError(ArtdeskError):
    def __init__(self, status_code: int, message: str, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EnvelopeError(ArtdeskError):
    """A 2xx response whose body reports failure via `success`/`status`."""

    def __init__(self, message: str, body=None):
        super().__init__(message)
        self.body = body


class ValidationError(ArtdeskError):
    def __init__(self, missing_fields: List[str], errors: Optional[List[str]] = None):
        self.missing_fields = list(missing_fields)
        self.errors = list(errors or [])
        parts = []
        if self.missing_fields:
            parts.append(f"Please fill in all required fields: {', '.join(self.missing_fields)}")
        parts.extend(self.errors)
        super().__init__("; ".join(parts) or "Invalid input")
