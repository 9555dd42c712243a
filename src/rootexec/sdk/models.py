"""Pydantic models for the run-file YAML schema consumed by ``rootexec run``."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from rootexec.runtime.command.models import CommandConfig, RunnerSettings


class RunFile(BaseModel):
    """Top-level run file: what to run, where, and with which host settings."""

    version: str = "1"
    label: str = ""
    command: CommandConfig = Field(default_factory=CommandConfig)
    settings: RunnerSettings = Field(default_factory=RunnerSettings)
    cmdline: list[str] = Field(default_factory=list)
    service_gate: bool = True

    @field_validator("command", mode="before")
    @classmethod
    def _normalise_env(cls, value: Any) -> Any:
        # Accept ``extra_env`` as a mapping as well as a list of KEY=VALUE.
        if isinstance(value, dict) and isinstance(value.get("extra_env"), dict):
            value = dict(value)
            value["extra_env"] = [f"{k}={v}" for k, v in value["extra_env"].items()]
        return value
