"""
Tracing configuration.

Tracing is off unless PHOENIX_ENABLED is set. Patient questions are kept
off spans unless PHOENIX_CAPTURE_QUERY_TEXT opts in; every place that
would attach query text goes through span_text().
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from medical_rag_pipeline.core.config import env_flag
from medical_rag_pipeline.core.errors import ConfigurationError


@dataclass(frozen=True)
class TracingConfig:
    """Environment Variables:
        PHOENIX_ENABLED: Export spans (default: false)
        PHOENIX_PROJECT_NAME: Phoenix project (default: medical-rag-pipeline)
        PHOENIX_COLLECTOR_ENDPOINT: http(s) OTLP endpoint; empty launches a local Phoenix app
        PHOENIX_CAPTURE_QUERY_TEXT: Attach raw query text to spans (default: false)
    """

    enabled: bool = False
    project_name: str = "medical-rag-pipeline"
    collector_endpoint: str | None = None
    capture_query_text: bool = False

    def __post_init__(self) -> None:
        endpoint = self.collector_endpoint
        if endpoint is not None and not endpoint.startswith(("http://", "https://")):
            raise ConfigurationError(f"PHOENIX_COLLECTOR_ENDPOINT must be an http(s) URL, got {endpoint!r}")

    @property
    def launches_local_app(self) -> bool:
        return self.collector_endpoint is None

    def span_text(self, text: str | None) -> str | None:
        """Query text as it may appear on a span: None unless capture is enabled."""
        return text if self.capture_query_text else None

    @classmethod
    def from_env(cls) -> "TracingConfig":
        return cls(
            enabled=env_flag("PHOENIX_ENABLED"),
            project_name=os.environ.get("PHOENIX_PROJECT_NAME") or "medical-rag-pipeline",
            collector_endpoint=os.environ.get("PHOENIX_COLLECTOR_ENDPOINT") or None,
            capture_query_text=env_flag("PHOENIX_CAPTURE_QUERY_TEXT"),
        )


_config: TracingConfig | None = None


def get_tracing_config() -> TracingConfig:
    global _config
    if _config is None:
        _config = TracingConfig.from_env()
    return _config


def reset_tracing_config() -> None:
    global _config
    _config = None
