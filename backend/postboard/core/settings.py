import os


def _getenv(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def _getenv_bool(name: str, default: bool = False) -> bool:
    raw = _getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y", "on"}


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.environment = (_getenv("ENVIRONMENT", "development") or "development").lower()
        self.log_level = (_getenv("LOG_LEVEL", "INFO") or "INFO").upper()
        self.database_url = _getenv("DATABASE_URL", "sqlite:///./postboard.db") or "sqlite:///./postboard.db"
        self.db_auto_create = _getenv_bool("DB_AUTO_CREATE", default=True)
        self.cors_allow_origins = _getenv("CORS_ALLOW_ORIGINS")

        self.jwt_secret = _getenv("JWT_SECRET")
        self.jwt_algorithm = _getenv("JWT_ALGORITHM", "HS256") or "HS256"
        self.jwt_ttl_minutes = _getenv_int("JWT_TTL_MINUTES", 60 * 24)

        self.uploads_dir = _getenv("UPLOADS_DIR", "./uploads") or "./uploads"
        self.uploads_url_prefix = _getenv("UPLOADS_URL_PREFIX", "/uploads") or "/uploads"

        self.payment_gateway = (_getenv("PAYMENT_GATEWAY", "simulated") or "simulated").lower()
        self.payment_gateway_url = _getenv("PAYMENT_GATEWAY_URL")
        self.payment_gateway_api_key = _getenv("PAYMENT_GATEWAY_API_KEY")
        self.payment_gateway_timeout_s = _getenv_int("PAYMENT_GATEWAY_TIMEOUT_S", 30)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def resolved_jwt_secret(self) -> str:
        if self.jwt_secret:
            return self.jwt_secret
        if self.is_production:
            raise RuntimeError("JWT_SECRET is not configured")
        return "postboard-dev-secret"

    def resolved_cors_origins(self) -> list[str]:
        raw = self.cors_allow_origins
        if raw is None:
            return ["http://localhost:5173", "http://localhost:8000"]
        if raw.strip() == "*":
            return ["*"]
        origins = [o.strip() for o in raw.split(",") if o.strip()]
        return origins


settings = Settings()
