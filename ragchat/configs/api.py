"""
HTTP service configuration settings.

Server binding and the set of browser origins allowed to call the API.

Dependencies: pydantic, pydantic_settings
System role: Service boundary configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from ragchat.configs.base import section_config


class APISettings(BaseSettings):
    """API server and CORS configuration."""

    model_config = section_config("API_")

    host: str = Field(default="0.0.0.0", description="Bind address for uvicorn")
    port: int = Field(default=8000, description="Bind port for uvicorn")

    frontend_base_url: str | None = Field(
        default=None,
        description="Deployed frontend origin allowed to call the API",
    )
    allowed_origins: list[str] = Field(
        default=["http://127.0.0.1:5500"],
        description="Additional allowed origins (JSON list in env)",
    )

    @property
    def origins(self) -> frozenset[str]:
        """
        Full set of allowed origins.

        Returns:
            frozenset[str]: allowed_origins plus frontend_base_url when set
        """
        origins = set(self.allowed_origins)
        if self.frontend_base_url:
            origins.add(self.frontend_base_url.rstrip("/"))
        return frozenset(origins)
