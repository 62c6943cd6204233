from decimal import Decimal
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "dev"
    secret_key: str = "change_me_super_secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    bcrypt_rounds: int = 12
    database_url: str = "postgresql+psycopg2://dukan:dukan@db:5432/dukan"
    backend_cors_origins: str = "http://localhost:5173"
    log_level: str = "INFO"
    seed_demo: bool = False

    # License keys are Fernet tokens derived from this secret
    license_encryption_key: str = "change_me_license_secret"
    # Shared secret for the license issuing endpoint
    license_issuer_key: str = "change_me_issuer_key"
    default_license_days: int = 365

    # Flat GST rate assumed for expenses recorded without itemised tax
    expense_gst_rate: Decimal = Decimal("18")

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        origins = self.backend_cors_origins
        return [origin.strip() for origin in origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
