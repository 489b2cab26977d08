from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from strategy_profiles.core.models import StrategyPromptContext
from strategy_profiles.logging.logger import get_logger

logger = get_logger("settings")


class Settings(BaseSettings):
    # Strategy
    trading_strategy: str = Field(default="balanced")
    max_leverage: float = Field(default=10, gt=0)

    # Runtime context for the AI prompt
    trading_interval_minutes: int = Field(default=5, gt=0)
    max_positions: int = Field(default=5, gt=0)
    max_holding_hours: float = Field(default=36, gt=0)
    extreme_stop_loss_pct: float = Field(default=30, gt=0)
    trading_symbols: list[str] = Field(default=["BTC/USDT", "ETH/USDT"])

    # Position monitor polling interval (external collaborator)
    monitor_interval_sec: int = Field(default=10, gt=0)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    def prompt_context(self, open_positions: int | None = None) -> StrategyPromptContext:
        """Runtime context for the renderer built from configured values"""
        return StrategyPromptContext(
            interval_minutes=self.trading_interval_minutes,
            open_positions=open_positions,
            max_positions=self.max_positions,
            max_holding_hours=self.max_holding_hours,
            extreme_stop_loss_pct=self.extreme_stop_loss_pct,
            monitor_interval_sec=self.monitor_interval_sec,
            symbols=tuple(self.trading_symbols),
        )

    @classmethod
    def load_safe(cls) -> "Settings":
        """Load settings with fail-closed behavior"""
        try:
            return cls()
        except Exception as e:
            # On ANY config failure, fall back to the balanced profile at 1x
            logger.warning("settings_fallback", error=str(e))
            return cls.model_construct(
                trading_strategy="balanced",
                max_leverage=1,
                trading_interval_minutes=5,
                max_positions=5,
                max_holding_hours=36,
                extreme_stop_loss_pct=30,
                trading_symbols=["BTC/USDT", "ETH/USDT"],
                monitor_interval_sec=10,
                log_level="INFO",
            )
