from pydantic import BaseModel
import os
from pathlib import Path
from dotenv import load_dotenv
load_dotenv()  # carga el archivo .env de la raíz

APP_VERSION = "1.0.0"

def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")

class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "Canil")
    env: str = os.getenv("APP_ENV", "dev")
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    db_name: str = os.getenv("DB_NAME", "canil")
    jwt_secret: str = os.getenv("JWT_SECRET", "change-me")
    jwt_expires_hours: int = int(os.getenv("JWT_EXPIRES_HOURS", "8"))
    media_dir: str = os.getenv("MEDIA_DIR", str(Path(__file__).resolve().parents[1] / "media"))
    frontend_base_url: str = os.getenv("FRONTEND_BASE_URL", "http://localhost:5173")

    # Migraciones al arrancar (equivalente al hook de activación)
    auto_migrate: bool = _env_bool("AUTO_MIGRATE", "true")
    migration_lock_ttl: int = int(os.getenv("MIGRATION_LOCK_TTL", "300"))

    # Dominio
    pedigree_max_generations: int = int(os.getenv("PEDIGREE_MAX_GENERATIONS", "5"))
    gestation_days: int = int(os.getenv("GESTATION_DAYS", "63"))


_settings: Settings | None = None
def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
        Path(_settings.media_dir).mkdir(parents=True, exist_ok=True)
        Path(_settings.media_dir, "dogs").mkdir(parents=True, exist_ok=True)
    return _settings
