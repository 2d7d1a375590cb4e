"""
Error classes for the Munhuolto infrastructure application.

Resolution never fails: every unset input falls through to a default.
The only error raised by the core is ConfigurationInvariantViolation, thrown
while building specs and always before any construct is handed to CDK.
"""

from typing import Dict, Any, List


class DomainError(Exception):
    """
    Base class for all infrastructure configuration errors.

    Carries a machine-readable code next to the human-readable message so the
    entry point can log it in a structured way.
    """

    def __init__(self, code: str, message: str, details: Dict[str, Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


class ConfigurationInvariantViolation(DomainError):
    """
    Raised when built specs break a stated invariant.

    Details contain the field-level errors returned by the validators,
    e.g. duplicate index names or a user grant wider than the admin grant.
    """

    def __init__(self, message: str, errors: List[Dict[str, str]]):
        super().__init__(
            'CONFIGURATION_INVARIANT_VIOLATION',
            message,
            {'errors': list(errors)},
        )

    @property
    def errors(self) -> List[Dict[str, str]]:
        return self.details['errors']
