from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Data freshness: linear decay from 1.0 to 0.0 across this window
    staleness_window_min: float = 60.0

    # Confidence cap when no contract-level security data was fetched
    no_security_confidence_cap: int = 70

    # Battle-tested override (very large, established assets)
    battle_tested_market_cap_usd: float = 50_000_000_000.0
    battle_tested_discount: float = 0.5  # fraction removed from the score
    battle_tested_cap: int = 30  # score never exceeds this once applied

    # LLM explainer via OpenRouter (optional, deterministic fallback otherwise)
    enable_llm_explainer: bool = False
    openrouter_api_key: str = ""
    llm_model: str = "google/gemini-2.5-flash-lite"
    llm_timeout_sec: float = 5.0
    llm_max_rps: float = 2.0

    # Explainer circuit breaker
    explainer_circuit_threshold: int = 3  # trip after N consecutive failures
    explainer_circuit_cooldown_sec: int = 300


settings = Settings()
