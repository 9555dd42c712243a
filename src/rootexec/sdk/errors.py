"""SDK error types."""

from __future__ import annotations

from rootexec.runtime.errors import ConfigurationError


class RunFileValidationError(ConfigurationError):
    """Raised when a run file fails parsing or validation."""
