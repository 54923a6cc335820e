"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- user_id
- conversation_id
- provider
- model
- duration_ms

Usage:
    from genius.utils.logging import configure_logging, log_quota_decision

    configure_logging('genius-api', 'INFO')
    log_quota_decision(logger, user_id='123', requested_model='gpt-4o', ...)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier (genius-api)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        # Create JSON formatter
        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(levelname)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        # Create console handler (for container logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        # Configure root logger
        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    user_id: Optional[str] = None,
    conversation_id: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        user_id: Optional user ID
        conversation_id: Optional conversation ID
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **{k: v for k, v in kwargs.items() if v is not None}
    }

    if user_id:
        extra["user_id"] = user_id
    if conversation_id:
        extra["conversation_id"] = conversation_id
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


# Quota event functions

def log_quotas_initialized(logger: logging.Logger, user_id: str, providers: list):
    """Log lazy creation of a user's quota rows."""
    extra = _build_log_extra(
        event="quotas_initialized",
        user_id=user_id,
        providers=providers,
    )
    logger.info(f"Quota rows created for user {user_id}", extra=extra)


def log_quotas_reset(logger: logging.Logger, user_id: str, providers: list):
    """Log a daily reset of one or more quota rows."""
    extra = _build_log_extra(
        event="quotas_reset",
        user_id=user_id,
        providers=providers,
    )
    logger.info(f"Daily quotas reset for user {user_id}", extra=extra)


def log_quota_decision(
    logger: logging.Logger,
    user_id: str,
    requested_model: str,
    provider: str,
    model: str,
    outcome: str,
    quota_remaining: Optional[int] = None,
    switched_provider: Optional[str] = None,
    **kwargs
):
    """
    Log a routing decision.

    Args:
        logger: Logger instance
        user_id: User ID (required)
        requested_model: Model id the caller asked for (required)
        provider: Provider that will serve the request (required)
        model: Model that will serve the request (required)
        outcome: direct, switched, paid or exhausted (required)
        quota_remaining: Remaining free requests, None when unbounded
        switched_provider: Display name of the substitute provider, if any
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="quota_decision",
        user_id=user_id,
        requested_model=requested_model,
        provider=provider,
        model=model,
        outcome=outcome,
        quota_remaining=quota_remaining,
        switched_provider=switched_provider,
        **kwargs
    )
    logger.info(f"Quota decision: {requested_model} -> {model} ({outcome})", extra=extra)


def log_quota_exhausted(
    logger: logging.Logger,
    user_id: str,
    requested_model: str,
    **kwargs
):
    """Log a request refused because no provider has quota left."""
    extra = _build_log_extra(
        event="quota_exhausted",
        user_id=user_id,
        requested_model=requested_model,
        **kwargs
    )
    logger.warning(f"Quota exhausted for user {user_id}", extra=extra)


def log_usage_recorded(
    logger: logging.Logger,
    user_id: str,
    provider: str,
    used_today: int,
    daily_limit: int,
    **kwargs
):
    """Log one unit of usage recorded against a provider."""
    extra = _build_log_extra(
        event="usage_recorded",
        user_id=user_id,
        provider=provider,
        used_today=used_today,
        daily_limit=daily_limit,
        **kwargs
    )
    logger.info(f"Usage recorded: {provider} {used_today}/{daily_limit}", extra=extra)


# Request handler event functions

def log_chat_completed(
    logger: logging.Logger,
    user_id: str,
    conversation_id: str,
    provider: str,
    model: str,
    duration_ms: float,
    tokens_used: Optional[int] = None,
    cost: Optional[str] = None,
    **kwargs
):
    """Log a completed chat exchange."""
    extra = _build_log_extra(
        event="chat_completed",
        user_id=user_id,
        conversation_id=conversation_id,
        duration_ms=duration_ms,
        provider=provider,
        model=model,
        tokens_used=tokens_used,
        cost=cost,
        **kwargs
    )
    logger.info(f"Chat completed: {conversation_id} via {model}", extra=extra)


def log_wallet_debited(
    logger: logging.Logger,
    user_id: str,
    amount: str,
    success: bool,
    **kwargs
):
    """Log a wallet debit attempt for paid usage."""
    extra = _build_log_extra(
        event="wallet_debited" if success else "wallet_debit_failed",
        user_id=user_id,
        amount=amount,
        **kwargs
    )
    if success:
        logger.info(f"Wallet debited {amount} for user {user_id}", extra=extra)
    else:
        logger.warning(f"Wallet debit of {amount} failed for user {user_id}", extra=extra)


# Provider event functions

def log_provider_request(
    logger: logging.Logger,
    provider: str,
    operation: str,
    duration_ms: Optional[float] = None,
    model: Optional[str] = None,
    **kwargs
):
    """
    Log AI provider request event.

    Args:
        logger: Logger instance
        provider: Provider name (gemini, anthropic, openai, groq) (required)
        operation: Operation name (chat, generate_image) (required)
        duration_ms: Optional duration in milliseconds
        model: Optional model id
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="provider_request",
        duration_ms=duration_ms,
        provider=provider,
        operation=operation,
        model=model,
        **kwargs
    )

    logger.info(f"Provider request: {provider}.{operation}", extra=extra)


def log_provider_failure(
    logger: logging.Logger,
    provider: str,
    operation: str,
    error: str,
    duration_ms: Optional[float] = None,
    model: Optional[str] = None,
    include_traceback: bool = False,
    **kwargs
):
    """
    Log AI provider failure event.

    Args:
        logger: Logger instance
        provider: Provider name (required)
        operation: Operation name (required)
        error: Error message (required)
        duration_ms: Optional duration in milliseconds
        model: Optional model id
        include_traceback: Whether to include stack trace (default: False for provider failures)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="provider_failure",
        duration_ms=duration_ms,
        provider=provider,
        operation=operation,
        model=model,
        error=str(error),
        **kwargs
    )

    message = f"Provider failure: {provider}.{operation} - {error}"

    # Stack traces for provider failures are optional (usually not needed)
    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
        else:
            logger.error(message, extra=extra)
    else:
        logger.error(message, extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
