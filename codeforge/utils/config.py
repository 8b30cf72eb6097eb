"""Runtime settings loaded from environment variables."""

import os
from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class ConfigurationError(Exception):
    """Raised when required settings are missing or invalid."""


class Settings(BaseModel):
    """Settings for a codeforge worker.

    Every field has a default except the API keys, which are only checked when a
    component that needs them is built (see ``require``).
    """

    llm_provider: str = "openrouter"
    model: str = "deepseek/deepseek-r1-distill-llama-70b:free"
    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    sandbox_backend: Literal["e2b", "local"] = "e2b"
    sandbox_template: str = "vibegourab"
    e2b_api_key: str | None = None
    preview_port: int = Field(default=3000, gt=0)

    max_iter: int = Field(default=15, gt=0)
    history_limit: int = Field(default=5, ge=0)

    step_max_retries: int = Field(default=2, ge=0)
    step_base_delay: float = Field(default=1.0, ge=0)
    step_max_delay: float = Field(default=10.0, ge=0)

    persistence_url: str | None = None
    persistence_api_key: str | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from ``CODEFORGE_*`` (and provider key) environment variables.

        Unset variables fall back to the field defaults.

        Raises:
            ConfigurationError: If a variable holds a value of the wrong type
        """
        env = os.environ if environ is None else environ
        mapping = {
            "llm_provider": "CODEFORGE_LLM_PROVIDER",
            "model": "CODEFORGE_MODEL",
            "openrouter_api_key": "OPENROUTER_API_KEY",
            "openrouter_base_url": "OPENROUTER_BASE_URL",
            "sandbox_backend": "CODEFORGE_SANDBOX_BACKEND",
            "sandbox_template": "CODEFORGE_SANDBOX_TEMPLATE",
            "e2b_api_key": "E2B_API_KEY",
            "preview_port": "CODEFORGE_PREVIEW_PORT",
            "max_iter": "CODEFORGE_MAX_ITER",
            "history_limit": "CODEFORGE_HISTORY_LIMIT",
            "step_max_retries": "CODEFORGE_STEP_MAX_RETRIES",
            "step_base_delay": "CODEFORGE_STEP_BASE_DELAY",
            "step_max_delay": "CODEFORGE_STEP_MAX_DELAY",
            "persistence_url": "CODEFORGE_PERSISTENCE_URL",
            "persistence_api_key": "CODEFORGE_PERSISTENCE_API_KEY",
        }
        values = {field: env[var] for field, var in mapping.items() if env.get(var)}
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def require(self, field: str) -> str:
        """Return a setting that must be present, raising ConfigurationError otherwise."""
        value = getattr(self, field)
        if not value:
            raise ConfigurationError(f"Missing required setting: {field}")
        return value
