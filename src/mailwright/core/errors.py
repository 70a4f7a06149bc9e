# =============================================================================
# Base Exception
# =============================================================================
# Every error raised by mailwright derives from MailError, so callers can
# catch one type around build/send and still tell the cases apart through
# the subclasses.
# =============================================================================


class MailError(Exception):
    """Base exception for mailwright."""
    pass
