from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _csv(name: str, default: str) -> tuple[str, ...]:
    value = _env(name, default) or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    loopring_subgraph_url: str
    graph_api_key: str
    graph_request_timeout_seconds: float
    graph_max_retries: int
    graph_min_interval_ms: int
    cors_allow_origins: tuple[str, ...]


def get_settings() -> Settings:
    return Settings(
        loopring_subgraph_url=_env(
            "LOOPRING_SUBGRAPH_URL",
            "https://api.thegraph.com/subgraphs/name/juanmardefago/loopring36",
        ),
        graph_api_key=_env("GRAPH_API_KEY", ""),
        graph_request_timeout_seconds=float(_env("GRAPH_REQUEST_TIMEOUT_SECONDS", "10")),
        graph_max_retries=int(_env("GRAPH_MAX_RETRIES", "3")),
        graph_min_interval_ms=int(_env("GRAPH_MIN_INTERVAL_MS", "0")),
        cors_allow_origins=_csv("CORS_ALLOW_ORIGINS", "*"),
    )
