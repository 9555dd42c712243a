"""rootexec SDK — describe runs in YAML and load them."""

from rootexec.sdk.errors import RunFileValidationError
from rootexec.sdk.loader import RunFileLoader
from rootexec.sdk.models import RunFile

__all__ = [
    "RunFile",
    "RunFileLoader",
    "RunFileValidationError",
]
