"""
LLM Logging Configuration

Provides:
- Logger setup with console + rotating file handlers
- Request/user/session context propagated through contextvars
- Structured (JSON) request, response, metrics and context-usage records

Usage:
    from logs.logging_config import setup_llm_logging, get_llm_logger, RequestContext

    setup_llm_logging()
    logger = get_llm_logger()

    with RequestContext():
        logger.info("[FLASHCARDS] START | chars=1200")
"""
import json
import uuid
import logging
import contextvars
from dataclasses import dataclass, asdict, field
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Dict, Any

from config import (
    estimate_tokens,
    CONTEXT_WARNING_THRESHOLD,
    CONTEXT_ERROR_THRESHOLD,
)
from .config import (
    LOG_OUTPUT_DIR,
    LOG_LEVEL,
    LOG_TO_FILES,
    LOG_MAX_BYTES,
    LOG_BACKUP_COUNT,
    LOG_PREVIEW_LENGTH,
    LOG_DATE_FORMAT,
    LOG_DETAILED_FORMAT,
    LOG_SIMPLE_FORMAT,
    LOG_JSON_FORMAT,
    LOG_FILE_REQUESTS,
    LOG_FILE_ERRORS,
    LOG_FILE_METRICS,
    LOG_FILE_DEBUG,
)

LOG_DIR = Path(LOG_OUTPUT_DIR)

LLM_LOGGER_NAME = "llm"
METRICS_LOGGER_NAME = "llm.metrics"

# =========================
# Context Variables
# =========================

_request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")
_session_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("session_id", default="-")
_user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("user_id", default="-")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())


def set_request_id(request_id: str) -> contextvars.Token:
    return _request_id_var.set(request_id)


def get_request_id() -> str:
    return _request_id_var.get()


def clear_request_id() -> None:
    _request_id_var.set("-")


def set_session_id(session_id: str) -> contextvars.Token:
    return _session_id_var.set(session_id)


def clear_session_id() -> None:
    _session_id_var.set("-")


def set_user_id(user_id: Optional[str]) -> contextvars.Token:
    return _user_id_var.set(user_id or "-")


def get_user_id() -> str:
    return _user_id_var.get()


def clear_user_id() -> None:
    _user_id_var.set("-")


class _ContextScope:
    """Sets a context variable for the duration of a with-block (sync or async)."""

    _var: contextvars.ContextVar = None

    def __init__(self, value: Optional[str] = None):
        self.value = value or self._default_value()
        self._token: Optional[contextvars.Token] = None

    def _default_value(self) -> str:
        return "-"

    def __enter__(self):
        self._token = self._var.set(self.value)
        return self

    def __exit__(self, exc_type, exc, tb):
        self._var.reset(self._token)
        return False

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc, tb):
        return self.__exit__(exc_type, exc, tb)


class RequestContext(_ContextScope):
    """Scope all log records to one request id (generated if not given)."""

    _var = _request_id_var

    def _default_value(self) -> str:
        return generate_request_id()

    @property
    def request_id(self) -> str:
        return self.value


class SessionContext(_ContextScope):
    _var = _session_id_var


class UserContext(_ContextScope):
    _var = _user_id_var


class ContextFilter(logging.Filter):
    """Injects request/user/session ids so formatters never hit a missing attribute."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id_var.get()
        if not hasattr(record, "user_id"):
            record.user_id = _user_id_var.get()
        if not hasattr(record, "session_id"):
            record.session_id = _session_id_var.get()
        return True


# =========================
# Structured Records
# =========================

def _preview(text: str) -> str:
    if len(text) <= LOG_PREVIEW_LENGTH:
        return text
    return text[:LOG_PREVIEW_LENGTH] + "..."


@dataclass
class LLMRequestLog:
    request_id: str
    model: str
    backend: str
    task: str
    prompt_chars: int
    prompt_preview: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    user_id: str = "-"
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)


@dataclass
class LLMResponseLog:
    request_id: str
    model: str
    backend: str
    status: str
    latency_ms: float
    response_chars: int
    response_preview: str
    attempts: int = 1
    error_message: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)


@dataclass
class LLMMetrics:
    request_id: str
    model: str
    backend: str
    task: str
    status: str
    latency_ms: float
    prompt_chars: int
    response_chars: int
    attempts: int = 1
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    context_limit: Optional[int] = None
    estimated_tokens: Optional[int] = None
    context_usage_percent: Optional[float] = None
    user_id: str = "-"
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)


@dataclass
class ContextUsageLog:
    request_id: str
    model: str
    context_limit: int
    estimated_tokens: int
    usage_percent: float
    level: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =========================
# Setup
# =========================

_configured = False


def _file_handler(filename: str, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        LOG_DIR / filename,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    return handler


def setup_llm_logging(level: Optional[str] = None, to_files: Optional[bool] = None) -> None:
    """
    Configure application logging. Safe to call more than once.

    Console output goes through the root logger so module loggers
    (logging.getLogger(__name__)) share the same format. File handlers
    split requests, errors, debug output and JSON metrics.
    """
    global _configured
    if _configured:
        return

    resolved_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    write_files = LOG_TO_FILES if to_files is None else to_files

    simple = logging.Formatter(LOG_SIMPLE_FORMAT, datefmt=LOG_DATE_FORMAT)
    detailed = logging.Formatter(LOG_DETAILED_FORMAT, datefmt=LOG_DATE_FORMAT)
    json_fmt = logging.Formatter(LOG_JSON_FORMAT)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler()
    console.setLevel(resolved_level)
    console.setFormatter(simple)
    console.addFilter(ContextFilter())
    root.addHandler(console)

    metrics_logger = logging.getLogger(METRICS_LOGGER_NAME)
    metrics_logger.setLevel(logging.INFO)
    metrics_logger.propagate = False

    if write_files:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        root.addHandler(_file_handler(LOG_FILE_REQUESTS, logging.INFO, simple))
        root.addHandler(_file_handler(LOG_FILE_ERRORS, logging.ERROR, detailed))
        root.addHandler(_file_handler(LOG_FILE_DEBUG, logging.DEBUG, detailed))
        metrics_logger.addHandler(_file_handler(LOG_FILE_METRICS, logging.INFO, json_fmt))

    _configured = True
    root.debug(f"[LOGGING] Configured | level={logging.getLevelName(resolved_level)} | files={write_files}")


def get_llm_logger() -> logging.Logger:
    """Logger shared by the LLM client internals."""
    return logging.getLogger(LLM_LOGGER_NAME)


def get_metrics_logger() -> logging.Logger:
    """Logger that receives one JSON line per LLM call."""
    return logging.getLogger(METRICS_LOGGER_NAME)


# =========================
# Structured Logging Helpers
# =========================

def log_llm_request(
    model: str,
    backend: str,
    task: str,
    prompt: str,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> str:
    """
    Log an outgoing LLM request.

    Reuses the request id of the surrounding RequestContext, or
    generates a fresh one.

    Returns:
        The request id the call is logged under
    """
    request_id = get_request_id()
    if request_id == "-":
        request_id = generate_request_id()

    logger = get_llm_logger()
    record = LLMRequestLog(
        request_id=request_id,
        model=model,
        backend=backend,
        task=task,
        prompt_chars=len(prompt),
        prompt_preview=_preview(prompt),
        temperature=temperature,
        max_tokens=max_tokens,
        user_id=get_user_id(),
    )
    logger.info(
        f"[LLM_REQUEST] model={model} | backend={backend} | task={task} | "
        f"prompt_chars={len(prompt)}",
        extra={"request_id": request_id},
    )
    logger.debug(record.to_json(), extra={"request_id": request_id})
    return request_id


def log_llm_response(
    request_id: str,
    model: str,
    backend: str,
    response: str,
    latency_ms: float,
    status: str,
    attempts: int = 1,
    error_message: Optional[str] = None,
) -> None:
    """Log the outcome of an LLM call."""
    logger = get_llm_logger()
    record = LLMResponseLog(
        request_id=request_id,
        model=model,
        backend=backend,
        status=status,
        latency_ms=round(latency_ms, 2),
        response_chars=len(response),
        response_preview=_preview(response),
        attempts=attempts,
        error_message=error_message,
    )
    if status == "success":
        logger.info(
            f"[LLM_RESPONSE] status=success | model={model} | latency_ms={latency_ms:.0f} | "
            f"attempts={attempts} | response_chars={len(response)}",
            extra={"request_id": request_id},
        )
    else:
        logger.error(
            f"[LLM_RESPONSE] status={status} | model={model} | latency_ms={latency_ms:.0f} | "
            f"attempts={attempts} | error={error_message}",
            extra={"request_id": request_id},
        )
    logger.debug(record.to_json(), extra={"request_id": request_id})


def log_metrics(
    request_id: str,
    model: str,
    backend: str,
    task: str,
    latency_ms: float,
    prompt_chars: int,
    response_chars: int,
    status: str,
    attempts: int = 1,
    prompt_tokens: Optional[int] = None,
    completion_tokens: Optional[int] = None,
    total_tokens: Optional[int] = None,
    context_limit: Optional[int] = None,
    estimated_tokens: Optional[int] = None,
    context_usage_percent: Optional[float] = None,
) -> None:
    """Write one JSON metrics line for an LLM call."""
    metrics = LLMMetrics(
        request_id=request_id,
        model=model,
        backend=backend,
        task=task,
        status=status,
        latency_ms=round(latency_ms, 2),
        prompt_chars=prompt_chars,
        response_chars=response_chars,
        attempts=attempts,
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=total_tokens,
        context_limit=context_limit,
        estimated_tokens=estimated_tokens,
        context_usage_percent=context_usage_percent,
        user_id=get_user_id(),
    )
    get_metrics_logger().info(metrics.to_json(), extra={"request_id": request_id})


def log_context_usage(
    request_id: str,
    model: str,
    prompt: str,
    context_limit: int,
) -> Dict[str, Any]:
    """
    Estimate how much of the model context the prompt consumes.

    Logs a warning above CONTEXT_WARNING_THRESHOLD and an error above
    CONTEXT_ERROR_THRESHOLD percent.

    Returns:
        dict with 'context_limit', 'estimated_tokens' and 'usage_percent'
    """
    estimated = estimate_tokens(prompt)
    usage_percent = round((estimated / context_limit) * 100, 2) if context_limit else 0.0

    if usage_percent >= CONTEXT_ERROR_THRESHOLD:
        level = "error"
    elif usage_percent >= CONTEXT_WARNING_THRESHOLD:
        level = "warning"
    else:
        level = "ok"

    usage = ContextUsageLog(
        request_id=request_id,
        model=model,
        context_limit=context_limit,
        estimated_tokens=estimated,
        usage_percent=usage_percent,
        level=level,
    )

    logger = get_llm_logger()
    message = (
        f"[CONTEXT] model={model} | tokens={estimated} | limit={context_limit} | "
        f"usage={usage_percent:.1f}%"
    )
    if level == "error":
        logger.error(message, extra={"request_id": request_id})
    elif level == "warning":
        logger.warning(message, extra={"request_id": request_id})
    else:
        logger.debug(message, extra={"request_id": request_id})

    return usage.to_dict()
