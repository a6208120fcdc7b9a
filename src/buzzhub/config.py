"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with BUZZHUB_ prefix.
No config files: the relay runs on a quiz-night laptop next to the
buzzer box, and env vars are all it needs.

Learn: The defaults suit a single local server. Port 9090 matches the
port the buzzer hardware is configured to hit.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via BUZZHUB_* env vars."""

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 9090

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Streaming
    send_timeout_seconds: float = 1.0  # per-write limit before a client is evicted
    max_pending_frames: int = 64  # frames buffered per client
    keepalive_seconds: float = 15.0  # idle time before a keepalive comment; 0 disables

    # Shutdown
    shutdown_grace_seconds: float = 5.0  # wait for open connections before forcing exit

    model_config = {"env_prefix": "BUZZHUB_"}

    @model_validator(mode="after")
    def validate_streaming_settings(self):
        """Reject limits that would evict every client or never buffer."""
        if self.send_timeout_seconds <= 0:
            raise ValueError("BUZZHUB_SEND_TIMEOUT_SECONDS must be positive")
        if self.max_pending_frames < 1:
            raise ValueError("BUZZHUB_MAX_PENDING_FRAMES must be at least 1")
        if self.keepalive_seconds < 0:
            raise ValueError("BUZZHUB_KEEPALIVE_SECONDS cannot be negative")
        if self.shutdown_grace_seconds <= 0:
            raise ValueError("BUZZHUB_SHUTDOWN_GRACE_SECONDS must be positive")
        return self


# Singleton — import this everywhere
settings = Settings()
