from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Courtside API"
    LOG_LEVEL: str = "INFO"
    # Comma-separated origins for CORS (e.g. https://courtside.co.za,https://admin.courtside.co.za). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Supabase/Render give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    # Public base URL of this API, used for PayFast return/cancel/notify URLs
    APP_BASE_URL: str = "http://localhost:8000"

    # PayFast (https://developers.payfast.co.za/docs)
    PAYFAST_MERCHANT_ID: str = ""
    PAYFAST_MERCHANT_KEY: str = ""
    PAYFAST_PASSPHRASE: str = ""
    PAYFAST_SANDBOX: bool = False  # Also forced on when PAYFAST_MERCHANT_ID is empty
    PAYFAST_ONSITE_ENABLED: bool = True  # Try onsite (embedded modal) first, fall back to the hosted form
    PAYFAST_TIMEOUT: int = 25
    PAYFAST_CURRENCY: str = "ZAR"

    @property
    def api_base_url(self) -> str:
        return self.APP_BASE_URL.rstrip("/") + "/api/v1"


settings = Settings()
