"""Search gateway configuration."""
from pydantic import AliasChoices, Field

from shared.config import BaseAppSettings


class GatewaySettings(BaseAppSettings):
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = Field(
        "development", validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV")
    )
    meilisearch_host: str | None = None
    meilisearch_api_key: str | None = None
    global_index: str = "colmado_inventory"
    local_index_prefix: str = "productos_colmado_"
    request_timeout: int = Field(5000, ge=1)  # milliseconds, per engine call
    cancel_on_disconnect: bool = True
    disconnect_poll_interval: float = Field(0.1, gt=0)  # seconds

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"
