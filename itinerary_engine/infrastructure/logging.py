"""结构化日志：JSON line 格式，支持敏感信息脱敏"""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional

from itinerary_engine.security.redact import redact_sensitive


class StructuredLogger:
    """结构化日志器，输出 JSON line，自动脱敏敏感信息。"""

    def __init__(self, trace_id: Optional[str] = None, output=None):
        self.trace_id = trace_id or str(uuid.uuid4())[:8]
        self._output = output
        self._timers: dict[str, float] = {}

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        output = self._output or sys.stderr
        try:
            # 序列化后做全局脱敏
            line = redact_sensitive(json.dumps(data, ensure_ascii=False, default=str))
            output.write(line + "\n")
            output.flush()
        except Exception as exc:
            # Last-resort fallback to avoid silent logger failures.
            try:
                fallback = {
                    "event": "logger_internal_error",
                    "trace_id": self.trace_id,
                    "timestamp": time.time(),
                    "error": str(exc),
                }
                sys.stderr.write(json.dumps(fallback, ensure_ascii=False, default=str) + "\n")
                sys.stderr.flush()
            except Exception:
                return

    def segment_request(self, segment_key: str, *, mode: str, token: int, **extra: Any) -> None:
        self._timers[f"{segment_key}#{token}"] = time.time()
        self._emit({"event": "segment_request", "segment": segment_key, "mode": mode, "generation": token, **extra})

    def segment_commit(self, segment_key: str, *, state: str, token: int, **extra: Any) -> None:
        start = self._timers.pop(f"{segment_key}#{token}", time.time())
        duration_ms = round((time.time() - start) * 1000, 1)
        self._emit({
            "event": "segment_commit",
            "segment": segment_key,
            "state": state,
            "generation": token,
            "duration_ms": duration_ms,
            **extra,
        })

    def segment_discarded(self, segment_key: str, *, token: int, reason: str, **extra: Any) -> None:
        self._timers.pop(f"{segment_key}#{token}", None)
        self._emit({"event": "segment_discarded", "segment": segment_key, "generation": token, "reason": reason, **extra})

    def schedule_applied(self, day_id: str, *, conflicts: int, pending_segments: int, **extra: Any) -> None:
        self._emit({
            "event": "schedule_applied",
            "day": day_id,
            "conflicts": conflicts,
            "pending_segments": pending_segments,
            **extra,
        })

    def warning(self, component: str, message: str, **extra: Any) -> None:
        self._emit({"event": "warning", "component": component, "message": redact_sensitive(message), **extra})

    def error(self, component: str, error: str, **extra: Any) -> None:
        self._emit({"event": "error", "component": component, "error": redact_sensitive(error), **extra})


# 全局 logger
_logger: Optional[StructuredLogger] = None


def get_logger(trace_id: Optional[str] = None) -> StructuredLogger:
    global _logger
    if _logger is None or (trace_id and _logger.trace_id != trace_id):
        _logger = StructuredLogger(trace_id=trace_id)
    return _logger
