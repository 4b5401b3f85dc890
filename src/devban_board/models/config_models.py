"""Configuration models.

The active backend decides which document store the commands talk to:
a local JSON-file store or Firestore over REST.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class FirestoreConfig(BaseModel):
    """Firestore REST configuration."""

    project_id: str = Field(default="", description="Google Cloud project id")
    database: str = Field(default="(default)")
    endpoint: str = Field(default="https://firestore.googleapis.com/v1")
    timeout: int = Field(default=30)
    retry: int = Field(default=3)

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("endpoint cannot be empty")
        return v.strip().rstrip("/")


class LocalConfig(BaseModel):
    """Local JSON-file store configuration."""

    path: str | None = Field(
        default=None, description="Store file; defaults to the user data dir"
    )


class SyncConfig(BaseModel):
    """Live query configuration."""

    poll_interval: float = Field(default=2.0, gt=0, description="Seconds")


class SessionConfig(BaseModel):
    """Signed-in user, as issued by the auth provider."""

    uid: str | None = None
    token: str | None = Field(default=None, description="Bearer id token")


class OutputConfig(BaseModel):
    """Output configuration."""

    color: bool = Field(default=True)
    compact: bool = Field(default=False)


class AppConfig(BaseModel):
    """Main configuration."""

    backend: Literal["local", "firestore"] = Field(default="local")
    local: LocalConfig = Field(default_factory=LocalConfig)
    firestore: FirestoreConfig = Field(default_factory=FirestoreConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
