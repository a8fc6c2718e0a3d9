"""Authentication information for drimefs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Authentication information.

    Either a ready-made access token, or an email and password that are
    exchanged for a token on session start.
    """

    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    def __post_init__(self) -> None:
        for key in ("token", "email", "password"):
            value = getattr(self, key)
            if value is not None and not isinstance(value, str):
                raise TypeError(f"AuthInfo.{key} must be a string")

        if self.has_token:
            return
        if not (self.email and self.email.strip()) or not self.password:
            raise ValueError("either token or email+password must be provided")

    @property
    def has_token(self) -> bool:
        return bool(self.token and self.token.strip())

    def __repr__(self) -> str:
        return (
            f"AuthInfo(token={'***' if self.has_token else None}, "
            f"email={self.email!r}, password={'***' if self.password else None})"
        )
