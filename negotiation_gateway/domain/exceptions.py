"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidPlanError(DomainException):
    """Plan arithmetic was asked to work with a non-positive amount or term"""

    pass


class SessionNotFoundError(DomainException):
    """No negotiation session exists for the given identifier"""

    pass


class UnknownToolError(DomainException):
    """Orchestrator requested a tool the engine does not provide"""

    pass
