from decouple import config, Csv

class Settings:
    # Database Configuration
    DATABASE_URL: str = config("DATABASE_URL", default="sqlite:///./shop_discovery.db")
    SQL_ECHO: bool = config("SQL_ECHO", default=False, cast=bool)
    SQLITE_BUSY_TIMEOUT_SECONDS: float = config("SQLITE_BUSY_TIMEOUT_SECONDS", default=30.0, cast=float)

    # Discovery Configuration
    DEFAULT_SEARCH_RADIUS_KM: float = config("DEFAULT_SEARCH_RADIUS_KM", default=10.0, cast=float)
    SEARCH_DEFAULT_LIMIT: int = config("SEARCH_DEFAULT_LIMIT", default=20, cast=int)
    SEARCH_MAX_LIMIT: int = config("SEARCH_MAX_LIMIT", default=100, cast=int)

    # Review Configuration
    REVIEW_PAGE_MAX_LIMIT: int = config("REVIEW_PAGE_MAX_LIMIT", default=50, cast=int)

    # Rating Ledger Configuration
    LEDGER_MAX_RETRIES: int = config("LEDGER_MAX_RETRIES", default=5, cast=int)
    LEDGER_RETRY_BACKOFF_SECONDS: float = config("LEDGER_RETRY_BACKOFF_SECONDS", default=0.05, cast=float)
    LEDGER_RETRY_MAX_BACKOFF_SECONDS: float = config("LEDGER_RETRY_MAX_BACKOFF_SECONDS", default=1.0, cast=float)

    # CORS Configuration
    CORS_ORIGINS: list = config(
        "CORS_ORIGINS",
        default="http://localhost:3000,http://localhost:5173",
        cast=Csv()
    )

    # Environment
    ENVIRONMENT: str = config("ENVIRONMENT", default="development")
    DEBUG: bool = config("DEBUG", default=True, cast=bool)

    # Logging
    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")

settings = Settings()
