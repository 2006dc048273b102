from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Google Maps (geocoding + places autocomplete)
    google_maps_api_key: Optional[str] = None
    geocoding_region: str = "sg"
    geocoding_timeout: float = 5.0

    # Quest schedule: dates/times on quests are wall-clock values in this zone
    quest_timezone: str = "Asia/Singapore"

    # Map
    map_default_lat: float = 1.3521
    map_default_lng: float = 103.8198
    map_default_zoom: int = 12
    map_focus_zoom: int = 16
    cluster_grid_size: int = 60  # pixels
    cluster_max_zoom: int = 17

    # QuestBreak daily content (edge functions)
    daily_content_url: Optional[str] = None  # defaults to {supabase_url}/functions/v1
    daily_content_timeout: float = 10.0

    # App
    app_name: str = "sidequest-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_daily_content_url(self) -> str:
        if self.daily_content_url:
            return self.daily_content_url.rstrip("/")
        return f"{self.supabase_url.rstrip('/')}/functions/v1"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
