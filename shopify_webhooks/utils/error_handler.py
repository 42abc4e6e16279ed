"""
Excepciones de la librería de webhooks.

Todas derivan de AppException, que lleva un código estable, el status
HTTP asociado y un dict de detalles serializable para logs y respuestas.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Códigos de error expuestos en logs y respuestas JSON."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Admin API
    SHOPIFY_API_ERROR = "SHOPIFY_API_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INVALID_SHOP = "INVALID_SHOP"

    # Entregas y registro
    INVALID_WEBHOOK = "INVALID_WEBHOOK"
    INVALID_WEBHOOK_SIGNATURE = "INVALID_WEBHOOK_SIGNATURE"


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Error base de la librería.

    Args:
        message: Texto legible del error
        error_code: Código estable para clientes y alertas
        details: Datos de contexto (topic, endpoint, campos faltantes...)
        status_code: Status HTTP con el que se expone
        severity: Severidad para el logging
        is_retryable: Si repetir la operación puede funcionar
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = dict(details or {})
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ConfigurationException(AppException):
    """Faltan valores de configuración obligatorios para operar."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None, **kwargs):
        self.missing_fields = list(missing_fields or [])
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            severity=ErrorSeverity.CRITICAL,
            **kwargs,
        )
        self.details["missing_fields"] = self.missing_fields


class ShopifyAPIException(AppException):
    """
    Fallo al hablar con la Admin API de una tienda.

    Un 429 se marca como rate limited y reintentable; los 5xx también son
    reintentables. Sin código de respuesta (error de red) se expone como 503.
    """

    def __init__(
        self,
        message: str,
        api_response_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        rate_limited: bool = False,
        retry_after: Optional[float] = None,
        **kwargs,
    ):
        server_error = bool(api_response_code and api_response_code >= 500)

        if rate_limited:
            code, severity = ErrorCode.RATE_LIMIT_EXCEEDED, ErrorSeverity.LOW
        elif server_error:
            code, severity = ErrorCode.SHOPIFY_API_ERROR, ErrorSeverity.HIGH
        else:
            code, severity = ErrorCode.SHOPIFY_API_ERROR, ErrorSeverity.MEDIUM

        super().__init__(
            message=message,
            error_code=code,
            status_code=api_response_code or 503,
            severity=severity,
            is_retryable=rate_limited or server_error,
            **kwargs,
        )
        self.api_response_code = api_response_code
        self.endpoint = endpoint
        self.rate_limited = rate_limited
        self.retry_after = retry_after
        self.details.update(
            api_response_code=api_response_code,
            endpoint=endpoint,
            rate_limited=rate_limited,
            retry_after=retry_after,
        )


class InvalidShopError(AppException):
    """El dominio recibido no es una tienda *.myshopify.com / *.myshopify.io."""

    def __init__(self, shop: str, **kwargs):
        super().__init__(
            message=f"Invalid shop domain: {shop}",
            error_code=ErrorCode.INVALID_SHOP,
            status_code=400,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.shop = shop
        self.details["shop"] = shop


class InvalidWebhookError(AppException):
    """
    Entrega de webhook rechazada: body vacío, headers faltantes, firma
    inválida o topic sin handler.

    Cuando se lanza, la respuesta HTTP ya tiene escrito este status_code.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        topic: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INVALID_WEBHOOK,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status_code,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.topic = topic
        self.details["topic"] = topic


def create_error_response(exception: Exception) -> Dict[str, Any]:
    """
    Body JSON de error para la capa HTTP.

    Las excepciones ajenas a la librería se envuelven como UNKNOWN_ERROR.
    """
    if not isinstance(exception, AppException):
        exception = AppException(
            message=f"{type(exception).__name__}: {exception}",
            details={"original_exception": type(exception).__name__},
        )
    return {"error": True, **exception.to_dict()}


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Registra una excepción con su traceback y el contexto dado como extra.

    Args:
        exception: Error a registrar
        context: Campos extra (path, topic, shop...)
        level: Nivel de logging
    """
    extra: Dict[str, Any] = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        "traceback": "".join(traceback.format_exception(type(exception), exception, exception.__traceback__)),
        **(context or {}),
    }

    if isinstance(exception, AppException):
        extra["error_code"] = exception.error_code.value
        extra["severity"] = exception.severity.value
        extra["is_retryable"] = exception.is_retryable
        message = f"{exception.error_code.value}: {exception.message}"
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {exception}"

    logger.log(level, message, extra=extra)
