"""
Settings de la librería de webhooks.

Se leen de variables de entorno (y de .env) con pydantic-settings;
las credenciales de la app y HOST_NAME son obligatorias para operar.
"""

from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from shopify_webhooks.utils.error_handler import ConfigurationException


class Settings(BaseSettings):
    """Configuración de la app de Shopify, del servidor y del logging."""

    # === APP ===
    APP_NAME: str = "Shopify Webhooks"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # === SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)

    # === SHOPIFY ===
    SHOPIFY_API_KEY: str = Field(default="")
    # Secreto con el que Shopify firma cada webhook (HMAC-SHA256)
    SHOPIFY_API_SECRET_KEY: str = Field(default="")
    SHOPIFY_SCOPES: Annotated[List[str], NoDecode] = Field(default_factory=list)
    SHOPIFY_API_VERSION: str = Field(default="2021-07")
    # Host público de la app, usado para construir las URLs de callback
    HOST_NAME: str = Field(default="")
    IS_EMBEDDED_APP: bool = Field(default=True)
    SHOPIFY_REQUEST_TIMEOUT: int = Field(default=30)

    # === LOGGING ===
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE_PATH: Optional[str] = Field(default=None)
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)
    LOG_FORMAT: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @field_validator("SHOPIFY_SCOPES", mode="before")
    @classmethod
    def parse_scopes(cls, v):
        """Parsea SHOPIFY_SCOPES como lista separada por comas."""
        if isinstance(v, str):
            return [scope.strip() for scope in v.split(",") if scope.strip()]
        return v

    @field_validator("HOST_NAME")
    @classmethod
    def validate_host_name(cls, v):
        """El host se guarda sin esquema ni barra final."""
        v = v.strip()
        for scheme in ("https://", "http://"):
            if v.startswith(scheme):
                v = v[len(scheme):]
        return v.rstrip("/")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Nivel de logging estándar, en mayúsculas."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Entorno conocido, en minúsculas."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """True en producción (logs JSON en archivo)."""
        return self.ENVIRONMENT == "production"

    @property
    def graphql_path(self) -> str:
        """Path del endpoint GraphQL Admin para la versión configurada."""
        return f"/admin/api/{self.SHOPIFY_API_VERSION}/graphql.json"

    def build_callback_url(self, path: str) -> str:
        """
        Construye la URL pública a la que Shopify entregará los webhooks.

        Args:
            path: Path local que recibe las entregas

        Returns:
            str: URL absoluta con esquema https
        """
        return f"https://{self.HOST_NAME}{path}"


@lru_cache()
def get_settings() -> Settings:
    """Settings compartidos por todo el proceso."""
    return Settings()


def reload_settings() -> Settings:
    """Descarta los settings cacheados y los vuelve a leer del entorno."""
    get_settings.cache_clear()
    return get_settings()


REQUIRED_SETTINGS = ("SHOPIFY_API_KEY", "SHOPIFY_API_SECRET_KEY", "SHOPIFY_SCOPES", "HOST_NAME")


def validate_required_settings(settings: Optional[Settings] = None) -> bool:
    """
    Comprueba que estén los valores sin los que no se puede registrar
    ni verificar webhooks.

    Args:
        settings: Configuración a validar (por defecto la global)

    Raises:
        ConfigurationException: Con todos los campos faltantes a la vez
    """
    settings = settings or get_settings()

    missing_fields = []
    for name in REQUIRED_SETTINGS:
        value = getattr(settings, name, None)
        if isinstance(value, str):
            value = value.strip()
        if not value:
            missing_fields.append(name)

    if missing_fields:
        raise ConfigurationException(
            f"Cannot initialize Shopify webhooks. Missing values for: {', '.join(missing_fields)}",
            missing_fields=missing_fields,
        )

    return True
