"""Legajos - Logging
Structured logging with request metrics and audit trails, built on loguru.
"""

import json
import sys
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger as loguru_logger


class MetricsCollector:
    """Collect and aggregate in-process counters and timings."""

    def __init__(self):
        self._counters: dict[str, int] = defaultdict(int)
        self._histograms: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()
        self._start_time = time.time()

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None):
        key = self._make_key(name, tags)
        with self._lock:
            self._counters[key] += value

    def histogram(self, name: str, value: float, tags: dict[str, str] | None = None):
        key = self._make_key(name, tags)
        with self._lock:
            self._histograms[key].append(value)
            # Keep last 1000 values
            if len(self._histograms[key]) > 1000:
                self._histograms[key] = self._histograms[key][-1000:]

    def _make_key(self, name: str, tags: dict[str, str] | None = None) -> str:
        if tags:
            tag_str = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
            return f"{name}{{{tag_str}}}"
        return name

    def get_stats(self) -> dict[str, Any]:
        """Get all metrics statistics."""
        with self._lock:
            stats = {
                "uptime_seconds": time.time() - self._start_time,
                "counters": dict(self._counters),
                "histograms": {},
            }
            for name, values in self._histograms.items():
                if values:
                    sorted_vals = sorted(values)
                    stats["histograms"][name] = {
                        "count": len(values),
                        "min": sorted_vals[0],
                        "max": sorted_vals[-1],
                        "avg": sum(values) / len(values),
                        "p95": sorted_vals[int(len(sorted_vals) * 0.95)],
                    }
            return stats


class LegajosLogger:
    """Main logging class for Legajos."""

    def __init__(
        self,
        log_dir: str | None = None,
        log_level: str = "INFO",
        json_format: bool = True,
        enable_console: bool = True,
        enable_file: bool = True,
    ):
        self.log_dir = Path(log_dir) if log_dir else Path("./logs")
        self.log_level = log_level.upper()
        self.json_format = json_format
        self.metrics = MetricsCollector()

        if enable_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._setup(enable_console, enable_file)

    def _setup(self, enable_console: bool, enable_file: bool):
        loguru_logger.remove()

        if enable_console:
            loguru_logger.add(
                sys.stderr,
                level=self.log_level,
                format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
                colorize=True,
            )

        if enable_file:
            loguru_logger.add(
                self.log_dir / "legajos.log",
                rotation="100 MB",
                retention="30 days",
                compression="gz",
                level=self.log_level,
                format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            )
            loguru_logger.add(
                self.log_dir / "errors.log",
                rotation="50 MB",
                retention="90 days",
                compression="gz",
                level="ERROR",
                format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}\n{exception}",
            )
            if self.json_format:
                loguru_logger.add(
                    self.log_dir / "legajos.jsonl",
                    rotation="100 MB",
                    retention="30 days",
                    compression="gz",
                    level=self.log_level,
                    serialize=True,
                )

        self._logger = loguru_logger

    def _log(
        self,
        level: str,
        message: str,
        extra: dict[str, Any] | None = None,
        exc_info: bool = False,
    ):
        log = self._logger.opt(depth=2, exception=exc_info)
        if extra:
            log.log(level, "{} | {}", message, json.dumps(extra, default=str))
        else:
            log.log(level, "{}", message)
        self.metrics.increment(f"logs.{level.lower()}")

    def debug(self, message: str, **kwargs):
        self._log("DEBUG", message, kwargs or None)

    def info(self, message: str, **kwargs):
        self._log("INFO", message, kwargs or None)

    def warning(self, message: str, **kwargs):
        self._log("WARNING", message, kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        self._log("ERROR", message, kwargs or None, exc_info=exc_info)
        self.metrics.increment("errors.total")

    def critical(self, message: str, exc_info: bool = True, **kwargs):
        self._log("CRITICAL", message, kwargs or None, exc_info=exc_info)
        self.metrics.increment("errors.critical")

    def audit(self, action: str, resource_type: str, resource_id: Any, **kwargs):
        """Log audit entry for every mutation and export."""
        entry = {
            "action": action,
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            "timestamp": datetime.utcnow().isoformat(),
            **kwargs,
        }
        self._log("INFO", f"AUDIT: {action} on {resource_type}/{resource_id}", entry)
        self.metrics.increment("audit.total")
        self.metrics.increment(f"audit.{action}")

    @contextmanager
    def timer(self, name: str, tags: dict[str, str] | None = None):
        """Context manager for timing operations."""
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.metrics.histogram(f"{name}.duration_ms", duration_ms, tags)
            self.debug(f"Timer {name}: {duration_ms:.2f}ms", tags=tags)

    def record_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ):
        """Record HTTP request metrics."""
        tags = {"method": method, "status": str(status_code)}
        self.metrics.histogram("http.duration_ms", duration_ms, tags)
        self.metrics.increment(f"http.requests.{status_code}")
        self.metrics.increment("http.requests.total")

    def get_metrics(self) -> dict[str, Any]:
        return self.metrics.get_stats()


# Global logger instance
_logger: LegajosLogger | None = None


def get_logger() -> LegajosLogger:
    """Get or create the global logger."""
    global _logger
    if _logger is None:
        from core.config import log_settings

        _logger = LegajosLogger(
            log_dir=log_settings.dir,
            log_level=log_settings.level,
            json_format=log_settings.json_format,
            enable_file=log_settings.to_file,
        )
    return _logger


def configure_logging(
    log_dir: str | None = None,
    log_level: str = "INFO",
    json_format: bool = True,
    enable_file: bool = True,
) -> LegajosLogger:
    """Configure and return the logger.

    Loggers already handed out keep recording into the same metrics.
    """
    global _logger
    previous = _logger
    _logger = LegajosLogger(
        log_dir=log_dir,
        log_level=log_level,
        json_format=json_format,
        enable_file=enable_file,
    )
    if previous is not None:
        _logger.metrics = previous.metrics
    return _logger
