from pathlib import Path

from dotenv import dotenv_values
from pydantic_settings import BaseSettings

_ENV_FILE = Path(".env")
_env_vars = dotenv_values(str(_ENV_FILE)) if _ENV_FILE.exists() else {}


class Settings(BaseSettings):
    app_name: str = "Hotel Room Search"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    database_url: str = "sqlite+aiosqlite:///data/hotel.db"
    data_dir: Path = Path("data")
    seed_file: Path = Path(__file__).parent / "data" / "rooms.json"
    seed_on_startup: bool = True

    # search
    cache_ttl_seconds: float = 300.0
    cache_max_entries: int = 512
    default_page_size: int = 10
    max_page_size: int = 100

    # auth
    token_ttl_minutes: int = 60 * 24
    token_bytes: int = 32

    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8080"]
    frontend_url: str = ""

    # client
    api_base_url: str = "http://localhost:5000"
    search_debounce_ms: int = 700
    loading_floor_ms: int = 1000
    auth_storage_path: Path = Path("data/local_storage.json")
    auth_storage_key: str = "hotel-auth-storage"

    model_config = {
        "env_prefix": "HOTEL_",
        "env_file": ".env",
        "extra": "ignore",
    }

    def model_post_init(self, __context):
        # unprefixed names still honoured for existing deployments
        if not self.frontend_url:
            self.frontend_url = _env_vars.get("FRONTEND_URL") or ""
        if db_path := _env_vars.get("DB_PATH"):
            if self.database_url == Settings.model_fields["database_url"].default:
                self.database_url = f"sqlite+aiosqlite:///{db_path}"

    @property
    def allowed_origins(self) -> list[str]:
        origins = list(self.cors_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins


settings = Settings()
