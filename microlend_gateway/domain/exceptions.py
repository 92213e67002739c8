"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class BorrowerNotFoundError(DomainException):
    """No borrower exists with the requested id"""

    pass


class LoanNotFoundError(DomainException):
    """No loan exists with the requested id"""

    pass


class LoanNotPayableError(DomainException):
    """Loan is already settled and cannot accept payments"""

    pass


class InvalidStatusTransitionError(DomainException):
    """Requested loan status change is not allowed (paid/defaulted are terminal)"""

    pass


class ScheduleTooLongError(DomainException):
    """Loan terms produce more repayment periods than the schedule allows"""

    def __init__(self, max_periods: int):
        super().__init__(f"Schedule exceeds {max_periods} periods")
        self.max_periods = max_periods


class AssistantAPIError(DomainException):
    """Generative-text assistant returned an error or is unavailable"""

    pass
