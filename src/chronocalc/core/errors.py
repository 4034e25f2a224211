class ChronoError(Exception):
    """Base error."""

class InvalidInputError(ChronoError, ValueError):
    """Raised when an argument is malformed or lies outside the operation's domain."""

class ComputationDomainError(ChronoError, ArithmeticError):
    """Raised when a closed-form computation has no real solution (e.g. polar day/night)."""
