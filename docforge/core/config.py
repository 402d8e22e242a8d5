"""docforge settings.

Every value can be overridden with an environment variable of the same
name (case-insensitive) or in a ``.env`` file next to the process.
"""

import logging
from pathlib import Path

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Connection, rendering, generation and logging settings.

    Defaults target a local Confluence with the mermaid-cloud plugin and
    the public Kroki server.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Confluence
    confluence_base_url: str = Field(
        default="http://localhost:8090",
        description="Confluence root URL.",
    )
    confluence_username: str | None = Field(
        default=None,
        description="Optional basic-auth user.",
    )
    confluence_api_token: str | None = Field(
        default=None,
        description="Optional basic-auth password or API token.",
    )
    content_path: str = Field(
        default="/rest/api/content",
        description="Content REST path used for page fetch and creation.",
    )
    diagram_publish_path: str = Field(
        default="/rest/mermaidrest/1.0/mermaid",
        description="Diagram upload path prefix; the page ID is appended.",
    )
    request_timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds.",
    )
    append_title_timestamp: bool = Field(
        default=True,
        description="Append '-<epoch ms>' to created page titles.",
    )

    # Diagram rendering
    diagram_engine: str = Field(
        default="kroki",
        description="Diagram engine to use: 'kroki' or 'mmdc'.",
    )
    kroki_url: str = Field(
        default="https://kroki.io",
        description="Kroki server URL.",
    )
    mmdc_path: str = Field(
        default="mmdc",
        description="Path to the mermaid-cli executable.",
    )
    raster_default_width: int = Field(
        default=800,
        description="Canvas width for SVGs without a declared size.",
    )
    raster_default_height: int = Field(
        default=600,
        description="Canvas height for SVGs without a declared size.",
    )
    upload_delay_seconds: float = Field(
        default=0.5,
        description="Pause between two diagram uploads.",
    )

    # Content generation
    generation_api_url: str = Field(
        default="http://localhost:5001",
        description="Document generation service URL.",
    )
    generation_poll_interval: float = Field(
        default=10.0,
        description="Seconds between generation job status checks.",
    )
    generation_max_attempts: int = Field(
        default=20,
        description="Status checks before a generation job is abandoned.",
    )
    selected_model: str = Field(
        default="sonar-pro",
        description="Default model requested from the generation service.",
    )

    # API
    api_host: str = Field(
        default="0.0.0.0",
        description="Interface uvicorn binds to.",
    )
    api_port: int = Field(
        default=8000,
        description="Port uvicorn listens on.",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware (JSON list in env).",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory for info.log and error.log.",
    )
    log_json: bool = Field(
        default=True,
        description="Render structlog events as JSON instead of console text.",
    )

    @field_validator("diagram_engine")
    @classmethod
    def normalize_diagram_engine(cls, v: str) -> str:
        """Normalize and validate the diagram engine name."""
        v = v.strip().lower()
        if v not in ("kroki", "mmdc"):
            raise ValueError(f"Unknown diagram engine: {v}. Valid options: 'kroki', 'mmdc'")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the level so it matches logging level names."""
        return v.upper()

    def configure_logging(self) -> None:
        """Configure structlog and the stdlib fallback at ``log_level``.

        JSON output by default; ``log_json=False`` switches to the
        human-readable console renderer.
        """
        level = logging.getLevelName(self.log_level)
        if not isinstance(level, int):
            level = logging.INFO

        renderer = (
            structlog.processors.JSONRenderer()
            if self.log_json
            else structlog.dev.ConsoleRenderer(colors=False)
        )
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                renderer,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(format="%(message)s", level=level)
        logger.setLevel(level)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide Settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings
