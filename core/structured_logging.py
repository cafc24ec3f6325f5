"""
Structured logging infrastructure for the product search assistant.

Provides JSON logging with:
- Console output for development (human-readable, colored levels)
- Rotating JSON file handlers (daily rotation, 30-day retention)
- Separate error log file
- Helpers for the events the search path emits (search, LLM calls, errors)

Usage:
    from core.structured_logging import get_logger, log_search

    logger = get_logger("core.search")
    logger.info("Search started", extra={"event": "search_start", "query": "shoes"})
"""

import json
import logging
import sys
import time
import traceback
from datetime import datetime, timezone
from functools import wraps
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Dict, Optional

ROOT_LOGGER_NAME = "shopbot"


# =============================================================================
# Formatters
# =============================================================================

class JSONFormatter(logging.Formatter):
    """
    Formats log records as one JSON object per line.

    Output format:
    {
        "timestamp": "2026-10-18T10:30:00.123456Z",
        "level": "INFO",
        "logger": "shopbot.core.search",
        "message": "Search complete",
        "event": "search_complete",
        "session_id": "abc123",
        ...
    }
    """

    EXTRA_FIELDS = [
        # Request context
        "event", "session_id", "user_id", "query", "intent", "confidence",
        # Search path
        "options", "filter_by", "sort_by", "page", "per_page",
        "products_found", "results_returned", "search_latency_ms",
        "requested_sort", "min_price", "max_price", "suggestions",
        # Errors
        "error", "error_type", "error_message", "stack_trace", "context",
        # LLM calls
        "llm_model", "llm_tokens", "llm_latency_ms", "api_endpoint", "success",
        # Retry
        "operation", "attempt", "attempts", "max_attempts", "delay_seconds",
        # Timing
        "elapsed_ms", "response_time_ms", "total_latency_ms",
        # History
        "store",
    ]

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in self.EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        if record.exc_info:
            log_data["error_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
            log_data["stack_trace"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable formatter for console output.

    2026-10-18 10:30:00 | INFO     | shopbot.core.search | Search complete | event=search_complete
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    CONTEXT_FIELDS = ["session_id", "event", "search_latency_ms", "response_time_ms"]

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        color = self.COLORS.get(level, "")
        reset = self.COLORS["RESET"]

        msg = f"{timestamp} | {color}{level:8}{reset} | {record.name} | {record.getMessage()}"

        context_parts = []
        for name in self.CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                context_parts.append(f"{name}={value}")
        if context_parts:
            msg += f" | {', '.join(context_parts)}"

        if record.exc_info:
            msg += f"\n{self.formatException(record.exc_info)}"

        return msg


# =============================================================================
# Logger Setup
# =============================================================================

_loggers: Dict[str, logging.Logger] = {}
_initialized = False


def _daily_json_handler(path: Path, level: int) -> TimedRotatingFileHandler:
    """JSON lines, rotated at midnight, 30 days kept."""
    handler = TimedRotatingFileHandler(
        filename=str(path),
        when="midnight",
        interval=1,
        backupCount=30,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    handler.suffix = "%Y-%m-%d"
    return handler


def setup_logging(
    log_dir: str = "logs",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    enable_console: bool = True,
    enable_file: bool = True,
    enable_error_log: bool = True,
) -> None:
    """
    Initialize the logging system. Safe to call more than once.

    Creates:
    - logs/shopbot.log (all logs as JSON)
    - logs/errors.log (ERROR and above)
    - Console output (if enabled)

    Args:
        log_dir: Directory for log files
        console_level: Minimum level for console output
        file_level: Minimum level for shopbot.log
        enable_console: Whether to output to console
        enable_file: Whether to write shopbot.log
        enable_error_log: Whether to write errors.log
    """
    global _initialized
    if _initialized:
        return

    log_path = Path(log_dir)
    if enable_file or enable_error_log:
        log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers = []

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(ConsoleFormatter())
        root_logger.addHandler(console_handler)

    if enable_file:
        root_logger.addHandler(_daily_json_handler(log_path / "shopbot.log", file_level))

    if enable_error_log:
        root_logger.addHandler(_daily_json_handler(log_path / "errors.log", logging.ERROR))

    _initialized = True



def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the shopbot namespace.

    Args:
        name: Module name, e.g. "core.search"

    Returns:
        Logger instance (handlers are attached by setup_logging)
    """
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        logger_name = name
    else:
        logger_name = f"{ROOT_LOGGER_NAME}.{name}"

    if logger_name not in _loggers:
        _loggers[logger_name] = logging.getLogger(logger_name)

    return _loggers[logger_name]


# =============================================================================
# Convenience Functions
# =============================================================================

def log_search(
    query: str,
    params: Dict[str, Any],
    products_found: int,
    search_time_ms: float,
    error: Optional[str] = None,
    **extra
) -> None:
    """
    Log a completed (or degraded) engine search.

    Args:
        query: Free-text term sent to the engine
        params: Engine request parameters
        products_found: Engine-reported total matches
        search_time_ms: Time taken by the engine call
        error: Degradation message, if the search failed
        **extra: Additional fields
    """
    logger = get_logger("search")
    level = logging.INFO if error is None else logging.WARNING
    logger.log(
        level,
        f"Search complete: {products_found} products found",
        extra={
            "event": "search_complete",
            "query": query,
            "filter_by": params.get("filter_by"),
            "sort_by": params.get("sort_by"),
            "page": params.get("page"),
            "per_page": params.get("per_page"),
            "products_found": products_found,
            "search_latency_ms": round(search_time_ms, 2),
            "error": error,
            **extra
        }
    )


def log_llm_call(
    model: str,
    endpoint: str,
    latency_ms: float,
    tokens_used: Optional[int] = None,
    success: bool = True,
    error: Optional[str] = None,
    session_id: Optional[str] = None,
    **extra
) -> None:
    """
    Log an AI completion call.

    Args:
        model: Model used
        endpoint: Logical operation (e.g. "parse_query")
        latency_ms: Time taken for the call
        tokens_used: Tokens consumed (if reported)
        success: Whether the call succeeded
        error: Error message if failed
        session_id: Session identifier
    """
    logger = get_logger("llm")
    level = logging.INFO if success else logging.ERROR
    message = f"LLM call: {endpoint}" if success else f"LLM call failed: {endpoint}"

    logger.log(
        level,
        message,
        extra={
            "event": "llm_api_call",
            "session_id": session_id,
            "llm_model": model,
            "api_endpoint": endpoint,
            "llm_latency_ms": round(latency_ms, 2),
            "llm_tokens": tokens_used,
            "success": success,
            "error": error,
            **extra
        }
    )


def log_error(
    error: Exception,
    context: Optional[str] = None,
    session_id: Optional[str] = None,
    **extra
) -> None:
    """
    Log an error with full context.

    Args:
        error: The exception
        context: What was happening when it was raised
        session_id: Session identifier
    """
    logger = get_logger("error")
    logger.error(
        f"Error: {type(error).__name__}: {error}",
        extra={
            "event": "error",
            "session_id": session_id,
            "error_type": type(error).__name__,
            "stack_trace": traceback.format_exc(),
            "context": context,
            **extra
        },
        exc_info=True
    )


def log_conversation_turn(
    session_id: str,
    user_query: str,
    intent: str,
    confidence: Optional[float] = None,
    products_found: int = 0,
    response_time_ms: Optional[float] = None,
    error: Optional[str] = None,
    **extra
) -> None:
    """
    Log a complete assistant turn: one record per user message.

    Example:
        log_conversation_turn(
            session_id="session_20261018_134318",
            user_query="cheapest wireless headphones",
            intent="product_search",
            confidence=0.9,
            products_found=4,
            response_time_ms=450.5,
        )
    """
    logger = get_logger("conversation")
    logger.info(
        f"Conversation turn: {intent}",
        extra={
            "event": "conversation_turn",
            "session_id": session_id,
            "query": user_query,
            "intent": intent,
            "confidence": round(confidence, 2) if confidence is not None else None,
            "products_found": products_found,
            "response_time_ms": round(response_time_ms, 2) if response_time_ms is not None else None,
            "error": error,
            **extra
        }
    )


# =============================================================================
# Performance Timing
# =============================================================================

def timed(event_name: str, logger_name: str = "performance"):
    """
    Decorator to time function execution and log it at DEBUG.

    Usage:
        @timed("query_parse")
        def parse(text: str) -> SearchOptions:
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            timer = Timer()
            try:
                with timer:
                    result = func(*args, **kwargs)
            except Exception as e:
                get_logger(logger_name).error(
                    f"{event_name} failed after {timer.elapsed_ms:.2f}ms",
                    extra={
                        "event": f"{event_name}_error",
                        "elapsed_ms": round(timer.elapsed_ms, 2),
                        "error_type": type(e).__name__,
                    },
                    exc_info=True
                )
                raise
            get_logger(logger_name).debug(
                f"{event_name} completed",
                extra={
                    "event": f"{event_name}_timing",
                    "elapsed_ms": round(timer.elapsed_ms, 2),
                }
            )
            return result
        return wrapper
    return decorator



class Timer:
    """
    Context manager for timing code blocks.

    Usage:
        with Timer() as t:
            ...
        print(f"Took {t.elapsed_ms}ms")
    """

    def __init__(self):
        self.start_time = None
        self.end_time = None
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self.end_time = time.perf_counter()
        self.elapsed_ms = (self.end_time - self.start_time) * 1000
