"""Service gate subsystem — keeps service managers quiet inside chroots."""

from rootexec.runtime.services.gate import (
    NullServiceGate,
    PolicyRcServiceGate,
    ServiceGate,
)

__all__ = [
    "NullServiceGate",
    "PolicyRcServiceGate",
    "ServiceGate",
]
