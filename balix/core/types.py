"""
Exception types for the motion library.

Recoverable outcomes (no solution, prediction timeout, degenerate inputs)
are reported as values: ``None`` or a result record with ``valid=False``.
Exceptions are reserved for programming errors that the caller must fix.
"""


class BalixError(Exception):
    """Base exception for motion library failures."""
    pass


class ContractViolationError(BalixError):
    """
    A fatal API misuse.

    Raised for an unknown integrator scheme, a Verlet-family scheme without
    a previous state, or a non-positive integration step.
    """
    pass


class InvalidArgumentError(BalixError, ValueError):
    """A parameter record failed validation when validation was enforced."""
    pass
