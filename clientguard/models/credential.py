"""Credential storage data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class StorageTier(str, Enum):
    """Storage tier a credential was written to."""

    SESSION = "session"
    PERSISTENT = "persistent"


class StoredCredential(BaseModel):
    """A secret written through the credential store."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str
    tier: StorageTier
