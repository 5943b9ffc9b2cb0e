"""Errors raised by the review engine."""


class VocabReviewError(Exception):
    """Base class for all review engine errors."""


class NotFoundError(VocabReviewError):
    """A learner, vocabulary item or progress record does not exist."""


class InvalidInputError(VocabReviewError, ValueError):
    """Attempt or action data was rejected before any state changed."""


class ConflictError(VocabReviewError):
    """The progress record was modified concurrently; reload and retry."""


class AuditWriteFailure(VocabReviewError):
    """The best-effort audit log could not be written."""
