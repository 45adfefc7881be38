from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "AppCraft"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Outbound Proxy
    # ==========================================
    PROXY_BASE_URL: str = "https://urlbackend.created.app"
    PROXY_USER_AGENT: str = "AppCraft-Proxy/1.0"
    PROXY_DEFAULT_TIMEOUT_MS: int = 10000
    PROXY_DEFAULT_MAX_RETRIES: int = 3
    PROXY_DEFAULT_CACHE_TTL_MS: int = 300000  # 5 minutes
    PROXY_BACKOFF_BASE_SECONDS: float = 2.0  # delay before retry n = base ** n
    PROXY_RATE_LIMIT: str = "120/minute"

    # Cache housekeeping (independent of per-request TTLs)
    PROXY_CACHE_SWEEP_INTERVAL_MS: int = 60000  # 1 minute
    PROXY_CACHE_RETENTION_MS: int = 300000  # 5 minutes

    # ==========================================
    # Code Generator API
    # ==========================================
    CODEGEN_API_URL: str = "https://rpelitis.created.app/api/code-generator"
    CODEGEN_USER_AGENT: str = "AppCraft-Chat/1.0"
    CODEGEN_TIMEOUT_MS: int = 30000
    CODEGEN_MAX_RETRIES: int = 0
    CODEGEN_RATE_LIMIT: str = "20/minute"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Inbound request bodies above this are rejected with 413
    MAX_REQUEST_SIZE_BYTES: int = 10 * 1024 * 1024

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # Empty disables file logging

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


# Create settings instance
settings = Settings()
