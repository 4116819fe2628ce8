"""The acting user handed to every core operation by the identity provider."""

from __future__ import annotations

from dataclasses import dataclass

from .core.enums import RoleName


@dataclass(frozen=True)
class ActingUser:
    """Identity of the caller as supplied by the identity provider."""

    id: str
    email: str
    name: str
    role: RoleName

    @property
    def is_teacher(self) -> bool:
        return self.role == RoleName.TEACHER

    @property
    def is_parent(self) -> bool:
        return self.role == RoleName.PARENT
