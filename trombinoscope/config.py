"""
Configuration de l'application
Gestion des paramètres via les variables d'environnement
"""
from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    """Paramètres de l'application"""

    # Base de données
    database_url: str = "sqlite:///./trombinoscope.db"

    # JWT
    secret_key: str = "trombinoscope-dev-secret-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    jwt_issuer: str = "trombinoscope-api"
    jwt_audience: str = "trombinoscope-users"
    bcrypt_rounds: int = 12

    # Application
    app_name: str = "Trombinoscope & Agenda"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    default_avatar_url: str = "/assets/default-avatar.png"

    # CORS
    allowed_origins: list[str] = ["http://localhost:3001"]

    # Journaux
    log_dir: str = "./logs"
    log_retention_days: int = 30

    # Limitation du débit par IP
    rate_limit_enabled: bool = True
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    # Compte administrateur créé à l'initialisation
    admin_username: str = "admin"
    admin_email: str = "admin@trombinoscope.local"
    admin_password: str = "Admin123!"

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")
        case_sensitive = False


settings = Settings()
