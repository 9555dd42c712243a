"""Run-file loading for the rootexec SDK."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from rootexec.sdk.errors import RunFileValidationError
from rootexec.sdk.models import RunFile

if TYPE_CHECKING:
    from pathlib import Path


class RunFileLoader:
    """Load and validate a run-file YAML into a :class:`RunFile`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> RunFile:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.

        Raises:
            RunFileValidationError: On YAML parse errors or schema validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RunFileValidationError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise RunFileValidationError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise RunFileValidationError("Run file YAML must be a mapping")

        try:
            return RunFile.model_validate(data)
        except ValidationError as exc:
            raise RunFileValidationError(str(exc)) from exc
