"""Identity provider contract used to attribute reports and votes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Identity:
    """An authenticated actor, typically backed by a wallet address."""

    user_id: str
    display_name: str | None = None


class IdentityProvider(Protocol):
    def current_identity(self) -> Identity | None:
        ...


class StaticIdentityProvider:
    """Provider returning a fixed identity (or none)."""

    def __init__(self, identity: Identity | None = None) -> None:
        self.identity = identity

    def current_identity(self) -> Identity | None:
        return self.identity
