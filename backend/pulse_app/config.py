"""Application configuration."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pulse_core.history import MAX_CAPACITY, MIN_CAPACITY
from pulse_core.models import LevelPolicy, StrategyConfig, TrendRule


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PULSE_",
        extra="ignore",
    )

    # Tick feed
    feed_url: str = "wss://ws.derivws.com/websockets/v3"
    app_id: str = "69860"
    heartbeat_interval: float = Field(default=30.0, gt=0)
    reconnect_delay: float = Field(default=5.0, gt=0)
    # 1.0 = fixed delay; > 1.0 = exponential backoff capped at reconnect_max_delay
    reconnect_backoff: float = Field(default=1.0, ge=1.0)
    reconnect_max_delay: float = Field(default=60.0, gt=0)

    # Instruments and history
    instruments_file: str = ""  # empty = built-in catalog
    history_capacity: int = Field(default=20, ge=MIN_CAPACITY, le=MAX_CAPACITY)

    # Strategy parameters
    fast_period: int = 5
    slow_period: int = 10
    trend_rule: TrendRule = TrendRule.CROSSOVER
    level_policy: LevelPolicy = LevelPolicy.SWING
    swing_lookback: int = 10
    stop_pct: float = 0.005
    min_stop_pct: float = 0.001
    tp_risk_multiples: list[float] = [1.5, 3.0]
    buy_confidence_base: float = 70.0
    sell_confidence_base: float = 65.0
    confidence_jitter: float = 20.0
    confidence_ceiling: float = 90.0
    random_seed: int | None = None

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def feed_endpoint(self) -> str:
        """Full websocket URL including the application id."""
        separator = "&" if "?" in self.feed_url else "?"
        return f"{self.feed_url}{separator}app_id={self.app_id}"

    def strategy_config(self) -> StrategyConfig:
        """Build the pure strategy config consumed by pulse_core."""
        return StrategyConfig(
            fast_period=self.fast_period,
            slow_period=self.slow_period,
            trend_rule=self.trend_rule,
            level_policy=self.level_policy,
            swing_lookback=self.swing_lookback,
            stop_pct=self.stop_pct,
            min_stop_pct=self.min_stop_pct,
            tp_risk_multiples=self.tp_risk_multiples,
            buy_confidence_base=self.buy_confidence_base,
            sell_confidence_base=self.sell_confidence_base,
            confidence_jitter=self.confidence_jitter,
            confidence_ceiling=self.confidence_ceiling,
        )

    @model_validator(mode="after")
    def _check_capacity(self) -> "Settings":
        # The history must be able to hold the longest window the strategy reads
        required = self.strategy_config().required_history
        if self.history_capacity < required:
            raise ValueError(
                f"history_capacity ({self.history_capacity}) must be at least "
                f"the strategy's required history ({required})"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
