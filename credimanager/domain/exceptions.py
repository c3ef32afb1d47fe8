"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidScheduleError(DomainException):
    """Loan terms cannot produce a repayment schedule (zero installments, non-positive principal...)"""

    pass


class InvalidRecordError(DomainException):
    """Borrower, loan or payment record failed validation at construction"""

    pass


class AdvisoryError(DomainException):
    """Risk advisory service returned an error or is unavailable"""

    pass
