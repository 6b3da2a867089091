from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    # App
    APP_NAME: str = "gis.ph MCP Server"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    PUBLIC_BASE_URL: str = "https://mcp.gis.ph"

    # Upstream
    UPSTREAM_BASE_URL: str = "https://api.gis.ph/v1"
    # None waits for the upstream indefinitely
    UPSTREAM_TIMEOUT_SECONDS: float | None = None

    # Credentials
    API_KEY_HEADER: str = "x-api-key"
    API_KEY_QUERY_PARAM: str = "key"

    # Sessions
    SESSION_TTL_SECONDS: int = 86400
    SESSION_MAX_ENTRIES: int = 10000
    SSE_PING_INTERVAL_SECONDS: float = 30.0

    # MCP
    MCP_LOG_LEVEL: str = "INFO"
    TOOLS_CONFIG_PATH: str | None = None

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

@lru_cache()
def get_settings() -> Settings:
    return Settings()
