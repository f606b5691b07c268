"""Exception hierarchy for AiValidator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from aivalidator.schemas.results import AttemptRecord


class AiValidatorError(Exception):
    """Base class for every error raised by this package."""
    pass


class ConfigurationError(AiValidatorError):
    """Invalid or incomplete configuration (bad names, missing API keys)."""
    pass


class UnknownProviderError(ConfigurationError):
    """Raised when a provider name cannot be resolved."""

    def __init__(self, name: str, available: Sequence[str] = ()):
        self.name = name
        self.available = list(available)
        message = f"AI provider [{name}] is not configured."
        if self.available:
            message += f" Available providers: {', '.join(self.available)}"
        super().__init__(message)


class ProviderError(AiValidatorError):
    """
    Transport or API fault raised by a provider.

    Never retried by the validation loop: nothing was received to correct.
    """

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"[{provider}] {message}")


class CastError(AiValidatorError):
    """
    The schema's cast step failed on data that already passed validation.

    This is a contract violation on the schema side, so it is fatal and
    kept apart from validation failures.
    """

    def __init__(self, schema_name: str, attempts: Sequence["AttemptRecord"] = ()):
        self.schema_name = schema_name
        self.attempts: Tuple["AttemptRecord", ...] = tuple(attempts)
        super().__init__(f"Casting validated data with {schema_name} failed.")


class ValidationFailedError(AiValidatorError):
    """Raised by the "data or fail" helpers when every attempt failed."""

    def __init__(
        self,
        message: str,
        errors: Optional[Dict[str, List[str]]] = None,
        attempts: Sequence["AttemptRecord"] = (),
    ):
        self.errors = dict(errors or {})
        self.attempts: Tuple["AttemptRecord", ...] = tuple(attempts)
        super().__init__(message)
