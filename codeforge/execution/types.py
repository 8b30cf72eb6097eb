"""Shared types for sandbox backends."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class E2BSandboxConfig(BaseModel):
    """Configuration for E2B sandboxes."""

    api_key: str | None = Field(default=None, description="E2B API key (default: E2B_API_KEY)")
    timeout: int | None = Field(
        default=None, description="Sandbox lifetime in seconds before E2B reclaims it"
    )


class LocalSandboxConfig(BaseModel):
    """Configuration for local sandboxes."""

    root_dir: str | None = Field(
        default=None,
        description="Directory that holds one workspace per sandbox (default: a temp dir)",
    )
    timeout: int = Field(default=300, description="Command timeout in seconds")


class SandboxInfo(BaseModel):
    """Metadata about a sandbox."""

    type: Literal["local", "e2b"] = Field(description="Backend type")
    sandbox_id: str = Field(description="Sandbox identifier")
    template: str | None = Field(default=None, description="Template the sandbox was created from")
