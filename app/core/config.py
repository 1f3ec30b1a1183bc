from pydantic_settings import BaseSettings, SettingsConfigDict

class AppSettings(BaseSettings):
    app_name: str = "Antigravity-Proxy"
    version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8317

    # Fake upstream
    fake_upstream_host: str = "0.0.0.0"
    fake_upstream_port: int = 8318

    # Logging
    log_level: str = "INFO"

    # Proxy
    proxy_enabled: bool = True
    upstream_url: str = "https://cloudcode-pa.googleapis.com"  # Antigravity backend requests are forwarded to
    proxy_exclude_headers: str = ""  # Comma separated, not forwarded upstream in addition to host/content-length
    proxy_verify_ssl: bool = True

    proxy_connect_timeout: float = 10
    proxy_read_timeout: float = 300
    proxy_write_timeout: float = 30
    proxy_pool_timeout: float | None = None
    max_connections: int = 100
    max_keepalive_connections: int = 20

    proxy_max_retries: int = 3  # Retries after the first attempt
    proxy_base_delay: float = 0.5  # Base delay in seconds
    proxy_backoff_factor: float = 2.0  # Exponential backoff multiplier
    proxy_max_retry_delay: float = 60.0  # Longer server-advised delays are returned to the caller instead

    model_config = SettingsConfigDict(env_prefix="ANTIGRAVITY_PROXY_", env_file=".env", env_file_encoding="utf-8")

# Load settings
settings = AppSettings()
