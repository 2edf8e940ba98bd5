"""Configuration management using Pydantic Settings"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "negotiation-gateway"
    log_level: str = "INFO"

    # Conversation defaults
    default_debt_amount: float = 2400
    session_idle_ttl_seconds: float = 3600  # 0 keeps sessions until deleted
    payment_link_domain: str = "collectwise.com"

    # Minimum payment floor as a share of the debt, per frequency
    monthly_rate: float = 0.08
    biweekly_rate: float = 0.04
    weekly_rate: float = 0.02

    # Negotiation heuristics
    early_stage_limit: int = 2  # stages below this still escalate under-floor suggestions
    hardship_keywords: List[str] = ["hardship", "laid off", "medical", "difficult"]
    fallback_term_length: int = 6
    evaluate_counter_multiplier: float = 1.25
    hardship_counter_multiplier: float = 1.10
    suggest_floor_multiplier: float = 1.5
    suggest_hardship_multiplier: float = 1.2


settings = Settings()
