"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidTenorError(DomainException):
    """Tenor is below one installment or runs past the last representable date"""

    pass


class InvalidAmountError(DomainException):
    """Monetary amount is non-positive or finer than the currency precision"""

    pass


class DebtNotFoundError(DomainException):
    """Debt does not exist or belongs to another user"""

    pass


class AuthenticationError(DomainException):
    """Bearer token is missing, malformed or rejected by the identity provider"""

    pass


class IdentityProviderError(DomainException):
    """Identity provider returned an error or is unavailable"""

    pass
