"""
Retry and fallback for the two remote collaborators: the Typesense engine
and the OpenAI-compatible completion API.

Failures are sorted into categories and only transient ones are retried.
SearchExecutor retries engine calls and then degrades the response; the
AI components retry completion calls and then switch to the rule-based
implementations through with_graceful_degradation.

Usage:
    retry = RetryHandler(config=DEFAULT_ENGINE_RETRY, operation_name="engine_search")
    response = retry.call(lambda: engine.search(params))

    options = with_graceful_degradation(
        lambda: ai_parse(text),
        lambda: QueryParser().parse(text),
        config=DEFAULT_OPENAI_RETRY,
        operation_name="parse_query",
    )
"""

import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Type, TypeVar

from core.structured_logging import get_logger

T = TypeVar('T')

# Module logger
_logger = get_logger("core.api_retry")


# =============================================================================
# Error Classification
# =============================================================================

class ErrorCategory(Enum):
    """Failure categories used for retry decisions."""
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    CONNECTION_ERROR = "connection_error"
    AUTH_ERROR = "auth_error"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        return self in _TRANSIENT


_TRANSIENT = {
    ErrorCategory.RATE_LIMIT,
    ErrorCategory.TIMEOUT,
    ErrorCategory.SERVER_ERROR,
    ErrorCategory.CONNECTION_ERROR,
}

# Exception class names per client library (matched along the MRO)
_OPENAI_ERRORS: Dict[str, ErrorCategory] = {
    "RateLimitError": ErrorCategory.RATE_LIMIT,
    "APITimeoutError": ErrorCategory.TIMEOUT,
    "APIConnectionError": ErrorCategory.CONNECTION_ERROR,
    "InternalServerError": ErrorCategory.SERVER_ERROR,
    "AuthenticationError": ErrorCategory.AUTH_ERROR,
    "PermissionDeniedError": ErrorCategory.AUTH_ERROR,
    "BadRequestError": ErrorCategory.BAD_REQUEST,
    "UnprocessableEntityError": ErrorCategory.BAD_REQUEST,
    "NotFoundError": ErrorCategory.NOT_FOUND,
}

_TYPESENSE_ERRORS: Dict[str, ErrorCategory] = {
    "ServiceUnavailable": ErrorCategory.SERVER_ERROR,
    "ServerError": ErrorCategory.SERVER_ERROR,
    "HTTPStatus0Error": ErrorCategory.SERVER_ERROR,
    "Timeout": ErrorCategory.TIMEOUT,
    "RequestUnauthorized": ErrorCategory.AUTH_ERROR,
    "RequestForbidden": ErrorCategory.AUTH_ERROR,
    "RequestMalformed": ErrorCategory.BAD_REQUEST,
    "ObjectUnprocessable": ErrorCategory.BAD_REQUEST,
    "InvalidParameter": ErrorCategory.BAD_REQUEST,
    "ObjectNotFound": ErrorCategory.NOT_FOUND,
}

_CLIENT_ERRORS = {
    "openai": _OPENAI_ERRORS,
    "typesense": _TYPESENSE_ERRORS,
}

# Checked in order against the lowercased message
_MESSAGE_HINTS = [
    (("429", "rate limit", "too many requests"), ErrorCategory.RATE_LIMIT),
    (("timed out", "timeout"), ErrorCategory.TIMEOUT),
    (("connection", "network"), ErrorCategory.CONNECTION_ERROR),
    (("401", "unauthorized", "authentication"), ErrorCategory.AUTH_ERROR),
]


def _client_category(error: Exception) -> Optional[ErrorCategory]:
    for cls in type(error).__mro__:
        library = (cls.__module__ or "").split(".")[0]
        table = _CLIENT_ERRORS.get(library)
        if table and cls.__name__ in table:
            return table[cls.__name__]
    return None


def classify_error(error: Exception) -> ErrorCategory:
    """
    Classify a failure from the engine or completion client.

    Typed client errors are looked up by class; builtin network errors by
    type; anything else by message. ValueError (including malformed model
    output) is never transient.
    """
    category = _client_category(error)
    if category is not None:
        return category

    if isinstance(error, TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(error, ConnectionError):
        return ErrorCategory.CONNECTION_ERROR
    if isinstance(error, ValueError):
        return ErrorCategory.UNKNOWN

    message = str(error).lower()
    for hints, hinted in _MESSAGE_HINTS:
        if any(hint in message for hint in hints):
            return hinted

    return ErrorCategory.UNKNOWN


def is_retryable(error: Exception) -> bool:
    return classify_error(error).retryable


# =============================================================================
# Retry Configuration
# =============================================================================

@dataclass
class RetryConfig:
    """
    Retry profile.

    Attributes:
        max_attempts: Attempts including the first call
        base_delay: Seconds before the first retry
        max_delay: Upper bound for a single wait
        exponential_base: Backoff growth factor
        jitter: Randomize waits by +/- jitter_range
        jitter_range: Jitter as a fraction of the delay
        retry_on: Exception types to retry (None = use classify_error)
    """
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_range: float = 0.25
    retry_on: Optional[List[Type[Exception]]] = None

    def delay_for(self, attempt: int) -> float:
        """Wait before retrying after the given 0-based attempt."""
        delay = min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)
        if self.jitter:
            spread = delay * self.jitter_range
            delay = max(0.1, delay + random.uniform(-spread, spread))
        return delay


# Completion API: one retry, then the rule-based fallback
DEFAULT_OPENAI_RETRY = RetryConfig(max_attempts=2, base_delay=1.0, max_delay=10.0)

# Engine: one quick retry, then a degraded response
DEFAULT_ENGINE_RETRY = RetryConfig(max_attempts=2, base_delay=0.2, max_delay=1.0)


# =============================================================================
# Retry Handler
# =============================================================================

class RetryHandler:
    """
    Runs one remote call with retries.

    Example:
        handler = RetryHandler(DEFAULT_OPENAI_RETRY, operation_name="classify_intent")
        data = handler.call(lambda: llm.complete_json(prompt, message))
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        session_id: Optional[str] = None,
        operation_name: str = "api_call",
    ):
        self.config = config or RetryConfig()
        self.session_id = session_id
        self.operation_name = operation_name
        self.attempts = 0

    def should_retry(self, error: Exception, attempt: int) -> bool:
        if attempt >= self.config.max_attempts - 1:
            return False
        if self.config.retry_on:
            return isinstance(error, tuple(self.config.retry_on))
        return is_retryable(error)

    def call(self, func: Callable[[], T]) -> T:
        """
        Call func until it succeeds or retries run out.

        Raises:
            The last error when every attempt failed
        """
        self.attempts = 0
        waited = 0.0

        while True:
            try:
                result = func()
            except Exception as e:
                self.attempts += 1
                category = classify_error(e)
                if not self.should_retry(e, self.attempts - 1):
                    _logger.error(
                        f"{self.operation_name} failed after {self.attempts} attempt(s): "
                        f"{type(e).__name__} ({category.value})",
                        extra={
                            "event": "api_retry_exhausted",
                            "session_id": self.session_id,
                            "operation": self.operation_name,
                            "attempts": self.attempts,
                            "error_type": category.value,
                            "error_message": str(e)[:200],
                        },
                    )
                    raise

                delay = self.config.delay_for(self.attempts - 1)
                _logger.warning(
                    f"Retry {self.attempts}/{self.config.max_attempts} for {self.operation_name}: "
                    f"{type(e).__name__} ({category.value}), waiting {delay:.2f}s",
                    extra={
                        "event": "api_retry",
                        "session_id": self.session_id,
                        "operation": self.operation_name,
                        "attempt": self.attempts,
                        "error_type": category.value,
                        "error_message": str(e)[:200],
                        "delay_seconds": round(delay, 2),
                    },
                )
                time.sleep(delay)
                waited += delay
                continue

            self.attempts += 1
            if self.attempts > 1:
                _logger.info(
                    f"{self.operation_name} succeeded after {self.attempts} attempts",
                    extra={
                        "event": "api_retry_success",
                        "session_id": self.session_id,
                        "operation": self.operation_name,
                        "attempts": self.attempts,
                        "total_delay": round(waited, 2),
                    },
                )
            return result


def with_graceful_degradation(
    func: Callable[[], T],
    fallback_func: Callable[[], T],
    config: Optional[RetryConfig] = None,
    session_id: Optional[str] = None,
    operation_name: str = "api_call",
) -> T:
    """
    Call func with retries; on final failure return fallback_func().

    Example:
        intent = with_graceful_degradation(
            lambda: classify_with_model(message),
            lambda: IntentClassifier().classify(message),
            config=DEFAULT_OPENAI_RETRY,
            operation_name="classify_intent",
        )
    """
    handler = RetryHandler(config=config, session_id=session_id, operation_name=operation_name)
    try:
        return handler.call(func)
    except Exception as e:
        _logger.info(
            f"Falling back to local implementation for {operation_name}",
            extra={
                "event": "api_fallback",
                "session_id": session_id,
                "operation": operation_name,
                "attempts": handler.attempts,
                "error_type": classify_error(e).value,
                "error_message": str(e)[:200],
            },
        )
        return fallback_func()
