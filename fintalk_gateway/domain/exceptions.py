"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Caller input is missing or out of range"""

    pass


class ExtractionError(DomainException):
    """Structured-extraction service failed or returned an unusable payload"""

    pass


class TranscriptionError(ExtractionError):
    """Text-from-audio service failed"""

    pass


class StoreError(DomainException):
    """Persistence layer failed"""

    pass


class PartialWriteError(StoreError):
    """A later write of a multi-step operation failed after an earlier one succeeded"""

    pass


class LoanUpdateConflictError(StoreError):
    """Loan balance changed between read and compare-and-swap update"""

    pass
