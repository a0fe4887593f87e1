from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Database
    database_url: str = Field(default="sqlite:///./gridpulse.db")

    # Forecast model
    forecast_alpha: float = Field(default=0.5)  # pull of recent load toward baseline

    # Overload alert thresholds
    critical_threshold: float = Field(default=0.9)  # load / capacity
    min_lead_time_hours: int = Field(default=2)

    # Default diurnal pattern for transformers registered without history (kW)
    baseline_peak_hour: int = Field(default=19)
    baseline_peak_load_kw: float = Field(default=150.0)
    baseline_base_load_kw: float = Field(default=80.0)

    # "Current hour" is site-local time
    site_timezone: str = Field(default="Asia/Manila")

    # Number of readings averaged into the recent mean load
    reading_window_size: int = Field(default=12)

    # Scheduler interval (minutes)
    forecast_refresh_interval: int = Field(default=5)

    # Dashboard polling interval (seconds) - sent to frontend
    dashboard_refresh_interval: int = Field(default=15)

    # CORS
    cors_origins: str = Field(default="http://localhost:3000,http://localhost:5173")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
