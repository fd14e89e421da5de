"""Configuration module — frozen dataclass loaded from environment variables."""

import os
from dataclasses import dataclass

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    host: str = "0.0.0.0"
    port: int = 9000
    backlog: int = 10
    buffer_size: int = 1024
    data_file: str = "/var/tmp/aesdsocketdata"
    concurrent: bool = False
    poll_interval: float = 1.0
    truncate_on_start: bool = False
    fsync: bool = True
    log_level: str = "INFO"
    log_to_syslog: bool = False

    def validate(self):
        """Raise ValueError if any field is out of range."""
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port out of range: {self.port}")
        if self.backlog < 1:
            raise ValueError(f"backlog must be positive: {self.backlog}")
        if self.buffer_size < 1:
            raise ValueError(f"buffer_size must be positive: {self.buffer_size}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive: {self.poll_interval}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {self.log_level}")
        if not self.data_file:
            raise ValueError("data_file must not be empty")


def load_config() -> Config:
    """Build Config from environment variables with sensible defaults."""
    return Config(
        host=os.environ.get("SERVER_HOST", Config.host),
        port=int(os.environ.get("SERVER_PORT", Config.port)),
        backlog=int(os.environ.get("SERVER_BACKLOG", Config.backlog)),
        buffer_size=int(os.environ.get("BUFFER_SIZE", Config.buffer_size)),
        data_file=os.environ.get("DATA_FILE", Config.data_file),
        concurrent=_parse_bool(os.environ.get("CONCURRENT", "false")),
        poll_interval=float(os.environ.get("POLL_INTERVAL", Config.poll_interval)),
        truncate_on_start=_parse_bool(
            os.environ.get("TRUNCATE_ON_START", "false")
        ),
        fsync=_parse_bool(os.environ.get("FSYNC", "true")),
        log_level=os.environ.get("LOG_LEVEL", Config.log_level).upper(),
        log_to_syslog=_parse_bool(os.environ.get("LOG_TO_SYSLOG", "false")),
    )
