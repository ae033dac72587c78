"""Centralized application configuration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COSTAR_", env_file=".env", extra="ignore"
    )

    # Data storage path (cache store, graph snapshot, scores)
    data_path: Path = Path("data")
    log_level: str = "INFO"

    # Remote graph oracle (Wikidata)
    wikidata_api_url: str = "https://www.wikidata.org/w/api.php"
    wikidata_sparql_url: str = "https://query.wikidata.org/sparql"
    oracle_timeout: float = 30.0
    oracle_user_agent: str = "costar/1.0 (actor co-star trivia)"
    search_limit: int = 10
    label_languages: str = "en,fr"

    # Resolution cache
    cache_ttl_seconds: float = 7 * 24 * 60 * 60.0
    cache_max_bytes: int = 5 * 1024 * 1024
    cache_evict_fraction: float = 0.2

    # Name-correction collaborator (OpenAI-compatible chat completions)
    corrector_enabled: bool = True
    corrector_base_url: str = "http://127.0.0.1:11434/v1"
    corrector_api_key: str = "ollama"
    corrector_model: str = "llama3:70b"
    corrector_temperature: float = 0.1
    corrector_timeout: float = 20.0

    # Notability thresholds (sitelink counts)
    start_min_sitelinks: int = 50
    start_pool_size: int = 100
    walk_min_sitelinks: int = 20
    opponent_min_sitelinks: int = 30
    hint_min_sitelinks: int = 40
    opponent_candidate_limit: int = 30
    hint_candidate_limit: int = 20
    hint_count: int = 3

    # Challenge generation
    challenge_min_length: int = 3
    challenge_max_length: int = 8
    challenge_attempts: int = 3
    path_attempts: int = 5
    hint_path_max_length: int = 4

    # Local graph materializer
    graph_hub_count: int = 200
    graph_max_total: int = 5000
    graph_row_multiplier: int = 5
    graph_min_films: int = 5
    graph_top_fraction: float = 0.4


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
