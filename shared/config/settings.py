import os

from dotenv import load_dotenv

load_dotenv()

SSL_HOSTS = ("render.com", "railway.app", "neon.tech", "supabase.com")


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings:
    """Runtime configuration read from the environment (and .env)."""

    def __init__(self):
        self.database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./webpay.db")
        self.db_ssl = _flag("DB_SSL")
        self.port = int(os.getenv("PORT", "4000"))

        self.webpay_store_id = os.getenv("WEBPAY_STORE_ID", "")
        self.webpay_secret_key = os.getenv("WEBPAY_SECRET_KEY", "")
        self.webpay_api_url = os.getenv("WEBPAY_API_URL", "https://sandbox.webpay.by")
        self.webpay_verify_callback = _flag("WEBPAY_VERIFY_CALLBACK")

        self.public_base_url = os.getenv("PRODUCTION_URL", "")
        self.app_deep_link = os.getenv("APP_DEEP_LINK", "app://")

        self.rate_limit_enabled = _flag("RATE_LIMIT_ENABLED", "true")
        self.otel_enabled = _flag("OTEL_ENABLED", "true")
        self.otlp_endpoint = os.getenv("OTLP_ENDPOINT", "http://localhost:4317")

    @property
    def webpay_sandbox(self) -> bool:
        return "sandbox" in self.webpay_api_url

    def use_ssl(self) -> bool:
        if self.db_ssl:
            return True
        return any(host in self.database_url for host in SSL_HOSTS)


settings = Settings()
