# =============================================================================
# MIME Exceptions
# =============================================================================

from mailwright.core.errors import MailError


class MIMEError(MailError):
    """Raised when a MIME message can't be built."""
    pass


class BoundaryError(MIMEError):
    """Raised when a multipart boundary can't be generated or is invalid."""
    pass


class AttachmentError(MIMEError):
    """Raised when an attachment can't be read or encoded."""
    pass
