"""Provider configurations for the upstream stores."""

from pydantic import BaseModel, ConfigDict


class SanityConfig(BaseModel):
    """Content store (Sanity) configuration."""

    model_config = ConfigDict(extra="ignore")

    project_id: str = ""
    dataset: str = "production"
    api_version: str = "2023-05-03"
    # Read token is optional for public datasets.
    token: str = ""
    use_cdn: bool = True
    timeout: float = 10.0


class SwellConfig(BaseModel):
    """Commerce store (Swell) configuration."""

    model_config = ConfigDict(extra="ignore")

    store_id: str = ""
    public_key: str = ""
    timeout: float = 8.0

    @property
    def base_url(self) -> str:
        return f"https://{self.store_id}.swell.store/api"


class WebhookConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Shared secret for cache invalidation webhooks (Bearer token).
    secret: str = ""
