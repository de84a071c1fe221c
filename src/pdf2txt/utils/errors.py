"""Exception taxonomy for document conversion.

Every exception here is fatal for a single document only. The assembler
catches them at the document boundary and turns them into a status.
Cancellation is not an exception: stages return the ``CANCELLED`` variant.
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for per-document conversion failures."""

    pass


class ExtractionError(ConversionError):
    """The source bytes could not be decoded into text fragments.

    Examples: malformed or truncated PDF, unsupported file type.
    """

    pass


class SourceUnavailableError(ExtractionError):
    """The source file does not exist or cannot be read."""

    pass


class PasswordRequiredError(ExtractionError):
    """The document is encrypted and no valid passphrase was supplied."""

    def __init__(self, message: str = "Password-protected PDF", incorrect: bool = False):
        super().__init__(message)
        self.incorrect = incorrect


class ResourceLimitError(ConversionError):
    """Extracted text on a single page exceeds the configured byte cap."""

    def __init__(self, page: int, limit_bytes: int, message: Optional[str] = None):
        if message is None:
            message = f"Page {page} text exceeds {limit_bytes // (1024 * 1024)}MB limit"
        super().__init__(message)
        self.page = page
        self.limit_bytes = limit_bytes


def is_password_error(error: BaseException) -> bool:
    """Whether an arbitrary exception signals a missing or wrong passphrase.

    The typed error is the primary signal; message text is the fallback for
    errors raised by the PDF backend itself.
    """
    if isinstance(error, PasswordRequiredError):
        return True
    return "password" in str(error).lower()
