"""Application settings."""
import os
from dataclasses import dataclass
from typing import Optional


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class AppConfig:
    """Defaults for the mapping editor, exports and the Gradio server."""

    default_match_key: str = "id"
    default_replace_key: str = "filename"
    export_filename: str = "merged-data.json"
    preview_limit: int = 3
    log_level: str = "INFO"
    server_name: Optional[str] = None
    server_port: Optional[int] = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load config from environment variables."""
        return cls(
            default_match_key=os.getenv("JSON_MAPPER_MATCH_KEY", "id"),
            default_replace_key=os.getenv("JSON_MAPPER_REPLACE_KEY", "filename"),
            export_filename=os.getenv("JSON_MAPPER_EXPORT_NAME", "merged-data.json"),
            preview_limit=_env_int("JSON_MAPPER_PREVIEW_LIMIT", 3),
            log_level=os.getenv("JSON_MAPPER_LOG_LEVEL", "INFO").upper(),
            server_name=os.getenv("GRADIO_SERVER_NAME") or None,
            server_port=_env_int("GRADIO_SERVER_PORT", None),
        )


# Global instance
app_config = AppConfig.from_env()
