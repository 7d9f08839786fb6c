from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    DB_ECHO: bool = False

    REDIS_URL: str = "redis://localhost:6379/0"

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480  # 8 hours

    API_PREFIX: str = "/api"

    RATE_LIMIT: int = 30
    RATE_LIMIT_WINDOW: int = 600  # 10 minutes

    IDEMPOTENCY_TTL: int = 300  # 5 minutes
    QUOTE_CACHE_TTL: int = 60
    CATALOG_CACHE_TTL: int = 300

    MAILGUN_API_KEY: str = ""
    MAILGUN_DOMAIN: str = "trustcorreduria.com"
    MAILGUN_BASE_URL: str = "https://api.mailgun.net/v3"
    MAIL_FROM: str = "Trust Correduría de Seguros <info@trustcorreduria.com>"
    MAIL_TIMEOUT: int = 15
    MAIL_RETRIES: int = 3

    API_TITLE: str = "Trust Correduría API"
    API_DESCRIPTION: str = "Backend for auto insurance quotes, catalogs and user administration"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def mailgun_messages_url(self) -> str:
        return f"{self.MAILGUN_BASE_URL}/{self.MAILGUN_DOMAIN}/messages"

    @property
    def mail_from_no_reply(self) -> str:
        return f"Trust Correduría <no-reply@{self.MAILGUN_DOMAIN}>"


settings = Settings()
