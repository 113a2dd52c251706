from dataclasses import dataclass

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from checkout_api.errors import ConfigurationError

DEFAULT_AUTH_TOKEN_SECRET = "capstore-auth-token-secret"
MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    app_name: str = "Capstore Checkout Service"

    database_url: str = Field(
        default="sqlite+pysqlite:///./test.db",
        validation_alias="CAPSTORE_DATABASE_URL",
    )
    cors_allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    auth_token_secret: str = Field(
        default=DEFAULT_AUTH_TOKEN_SECRET,
        validation_alias="CAPSTORE_AUTH_TOKEN_SECRET",
    )
    allowed_roles: str = "CUSTOMER,OPS,ADMIN"
    testing: bool = Field(default=False, validation_alias="CAPSTORE_TESTING")

    gateway_base_url: str = "https://api.razorpay.com"
    gateway_key_id: str = Field(default="", validation_alias="RAZORPAY_KEY_ID")
    gateway_key_secret: str = Field(default="", validation_alias="RAZORPAY_KEY_SECRET")
    gateway_timeout_s: float = 10.0
    default_currency: str = "INR"

    email_api_base_url: str = "https://api.resend.com"
    email_api_key: str = Field(default="", validation_alias="RESEND_API_KEY")
    email_timeout_s: float = 5.0
    notification_sender: str = "CAPSTORE Orders <orders@resend.dev>"
    admin_email: str = Field(default="", validation_alias="ADMIN_EMAIL")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, value: str) -> str:
        code = value.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("default_currency must be a 3-letter ISO-4217 code")
        return code

    @field_validator("gateway_timeout_s", "email_timeout_s")
    @classmethod
    def validate_timeouts(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("outbound timeouts must be greater than 0")
        return value


settings = Settings()


@dataclass(frozen=True)
class GatewayCredentials:
    key_id: str
    key_secret: str

    def __repr__(self) -> str:
        return f"GatewayCredentials(key_id={self.key_id!r}, key_secret='***')"


@dataclass(frozen=True)
class NotificationSettings:
    api_key: str
    sender: str
    recipient: str


def gateway_credentials(source: Settings | None = None) -> GatewayCredentials:
    config = source or settings
    if not config.gateway_key_id.strip() or not config.gateway_key_secret.strip():
        raise ConfigurationError("RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET must be configured")
    return GatewayCredentials(key_id=config.gateway_key_id, key_secret=config.gateway_key_secret)


def notification_settings(source: Settings | None = None) -> NotificationSettings:
    config = source or settings
    return NotificationSettings(
        api_key=config.email_api_key,
        sender=config.notification_sender,
        recipient=config.admin_email,
    )


def allowed_origins() -> list[str]:
    return [origin.strip() for origin in settings.cors_allowed_origins.split(",") if origin.strip()]


def allowed_roles_list() -> list[str]:
    return [value.strip() for value in settings.allowed_roles.split(",") if value.strip()]


def ensure_secure_runtime_settings() -> None:
    """Fail fast when production-like runtime uses insecure defaults."""
    if not settings.testing:
        gateway_credentials()
    if not settings.testing and settings.auth_token_secret == DEFAULT_AUTH_TOKEN_SECRET:
        raise ConfigurationError(
            "CAPSTORE_AUTH_TOKEN_SECRET must be set to a non-default value "
            "when CAPSTORE_TESTING is false"
        )
    if not settings.testing and len(settings.auth_token_secret) < MIN_SECRET_LENGTH:
        raise ConfigurationError(
            "CAPSTORE_AUTH_TOKEN_SECRET must be at least "
            f"{MIN_SECRET_LENGTH} characters when CAPSTORE_TESTING is false"
        )
    if not settings.testing and _is_sqlite_url(settings.database_url):
        raise ConfigurationError(
            "CAPSTORE_DATABASE_URL must use postgres when CAPSTORE_TESTING is false"
        )


def _is_sqlite_url(database_url: str) -> bool:
    value = database_url.strip().lower()
    return value.startswith("sqlite")
