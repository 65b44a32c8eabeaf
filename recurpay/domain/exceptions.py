"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ClientNotFoundError(DomainException):
    """No client exists with the given identifier"""

    pass


class DuplicateClientEmailError(DomainException):
    """Another client is already registered with this email"""

    pass


class PaymentNotFoundError(DomainException):
    """No payment record exists with the given identifier"""

    pass


class PaymentStateError(DomainException):
    """Payment cannot move to the requested state"""

    pass
