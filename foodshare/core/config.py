from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SESSION_SECRET = "this-should-be-a-secret-in-production"


class Settings(BaseSettings):
    app_name: str = "FoodShare API"
    environment: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"
    base_url: str = "http://localhost:5000"
    cors_origins: List[str] = ["http://localhost:5000"]

    # sessions
    session_secret: str = DEFAULT_SESSION_SECRET
    session_alg: str = "HS256"
    session_cookie_name: str = "foodshare.sid"
    session_ttl_days: int = 7
    cookie_secure: bool = False

    # credentials
    bcrypt_rounds: int = Field(default=10, ge=10, le=31)
    reset_token_ttl_minutes: int = 60

    # storage
    use_mongo: bool = False
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "foodshare"

    # mail
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_starttls: bool = True
    email_from: str = '"FoodShare" <no-reply@foodshare.org>'

    # optional seed admin
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def validate_runtime_config(settings: Settings) -> None:
    if settings.environment == "production" and settings.session_secret == DEFAULT_SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET must be set in production.")
