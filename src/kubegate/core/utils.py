"""Utility functions and decorators."""

import asyncio
import logging.config
import structlog
import yaml
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar, Union
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from kubegate.core.exceptions import TransportException

T = TypeVar('T')


def retry_with_backoff(
    max_retries: int = 3,
    backoff_factor: float = 1.5,
    max_wait: float = 60.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)
):
    """Decorator for retry with exponential backoff."""
    return retry(
        stop=stop_after_attempt(max(1, max_retries)),
        wait=wait_exponential(multiplier=backoff_factor, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        reraise=True
    )


def setup_logging(config_path: Optional[Union[str, Path]] = None,
                  log_level: str = "INFO",
                  log_format: str = "text") -> None:
    """Setup structured logging configuration."""
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
    else:
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    if log_level.upper() != "DEBUG":
        # the kubernetes client and urllib3 log every request
        for name in ("kubernetes", "urllib3"):
            logging.getLogger(name).setLevel(logging.WARNING)

    renderer = structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def safe_get(dictionary: Dict[str, Any], key: str, default: Any = None) -> Any:
    """Safely get a value from a nested dictionary using dot notation."""
    keys = key.split('.')
    value = dictionary

    try:
        for k in keys:
            value = value[k]
        return value
    except (KeyError, TypeError):
        return default


async def run_blocking(func: Callable[..., T], *args: Any,
                       timeout: float, cluster_id: str, **kwargs: Any) -> T:
    """Run a blocking transport call in a worker thread, bounded by ``timeout`` seconds.

    Cancelling the awaiting task raises ``CancelledError`` in the caller right
    away, but a request already on the wire cannot be aborted from here: the
    worker thread runs until the call returns or its own ``_request_timeout``
    expires. After a cancelled create, re-read the object to learn its state.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout)
    except asyncio.TimeoutError:
        raise TransportException(cluster_id, f"timed out after {timeout}s", timeout=True)


async def gather_with_concurrency(
    coros: list,
    max_concurrency: int = 10,
    return_exceptions: bool = True
) -> list:
    """Execute coroutines with limited concurrency."""
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def limited_coro(coro):
        async with semaphore:
            return await coro

    limited_coros = [limited_coro(coro) for coro in coros]
    return await asyncio.gather(*limited_coros, return_exceptions=return_exceptions)
