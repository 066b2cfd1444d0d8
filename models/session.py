"""Datenmodell für Sitzung, Identität und Rolle (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Role(str, Enum):
    VIEWER = "viewer"
    ADMIN = "admin"


class SessionState(str, Enum):
    """Die vier Zustände des Rollen-Wächters."""
    ANONYMOUS_VIEWER = "anonymous-viewer"
    PASSWORD_ADMIN = "password-admin"
    IDENTITY_VIEWER = "identity-viewer"
    IDENTITY_ADMIN = "identity-admin"


class Identity(BaseModel):
    """Angemeldete Person laut Identity-Provider.

    Akzeptiert beim Lesen auch das alte Format (id/sub, name, picture).
    """

    model_config = ConfigDict(populate_by_name=True)

    external_id: str = Field(
        validation_alias=AliasChoices("externalId", "id", "sub", "external_id"),
        serialization_alias="externalId",
    )
    email: str = ""
    display_name: str = Field(
        "",
        validation_alias=AliasChoices("displayName", "name", "display_name"),
        serialization_alias="displayName",
    )
    avatar_ref: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("avatarRef", "picture", "avatar_ref"),
        serialization_alias="avatarRef",
    )


class Session(BaseModel):
    """Aktuelle Sitzung. Unabhängig vom Datensatz gespeichert."""

    identity: Optional[Identity] = None
    role: Role = Role.VIEWER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def state(self) -> SessionState:
        if self.identity is None:
            return SessionState.PASSWORD_ADMIN if self.is_admin else SessionState.ANONYMOUS_VIEWER
        return SessionState.IDENTITY_ADMIN if self.is_admin else SessionState.IDENTITY_VIEWER
