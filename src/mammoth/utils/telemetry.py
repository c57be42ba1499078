"""Lightweight telemetry events (opt-out via MAMMOTH_TELEMETRY=0)."""

from __future__ import annotations

import json
import os
import time
from collections import Counter, deque
from functools import lru_cache
from importlib import resources
from typing import Any, Iterable, Iterator

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from mammoth.settings import RuntimeSettings

LOG_FILENAME = "telemetry.jsonl"

_DISABLE_VALUES = {"0", "false", "no", "off"}
_REDACTED_KEYS = {"auth_token", "token", "password"}


def telemetry_enabled() -> bool:
    value = os.getenv("MAMMOTH_TELEMETRY", "1").lower()
    return value not in _DISABLE_VALUES


def record_event(settings: RuntimeSettings, event: str, payload: dict[str, Any] | None = None, **extra: Any) -> None:
    record_structured_event(settings, event, payload=payload, **extra)


def record_structured_event(
    settings: RuntimeSettings,
    event: str,
    *,
    payload: dict[str, Any] | None = None,
    level: str = "info",
    status: str | None = None,
    component: str | None = None,
    duration_ms: float | None = None,
) -> None:
    if not telemetry_enabled():
        return
    optional = {"status": status, "component": component, "durationMs": duration_ms}
    record: dict[str, Any] = {"ts": time.time(), "event": event, "payload": _redact(payload or {}), "level": level}
    record.update({key: value for key, value in optional.items() if value not in (None, "")})
    _check(record)
    log_path = settings.log_dir / LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")


def iter_events(settings: RuntimeSettings) -> Iterator[dict[str, Any]]:
    log_path = settings.log_dir / LOG_FILENAME
    if not log_path.exists():
        return
    with log_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                continue


def recent_events(settings: RuntimeSettings, limit: int) -> list[dict[str, Any]]:
    """Return at most ``limit`` of the newest events, oldest first."""
    if limit <= 0:
        return list(iter_events(settings))
    return list(deque(iter_events(settings), maxlen=limit))


def summarize(events: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Count events per name, status and level; durations are averaged per event name."""
    by_event: Counter[str] = Counter()
    by_status: Counter[str] = Counter()
    by_level: Counter[str] = Counter()
    durations: dict[str, list[float]] = {}
    for evt in events:
        name = evt.get("event", "unknown")
        by_event[name] += 1
        by_status[evt.get("status", "unknown")] += 1
        by_level[evt.get("level", "info")] += 1
        if isinstance(evt.get("durationMs"), (int, float)):
            durations.setdefault(name, []).append(float(evt["durationMs"]))
    return {
        "total": sum(by_event.values()),
        "by_event": dict(by_event),
        "by_status": dict(by_status),
        "by_level": dict(by_level),
        "avg_duration_ms": {name: round(sum(values) / len(values), 3) for name, values in durations.items()},
    }


def clear(settings: RuntimeSettings) -> bool:
    """Delete the event log; False when there was nothing to delete."""
    log_path = settings.log_dir / LOG_FILENAME
    if not log_path.exists():
        return False
    log_path.unlink()
    return True


def _redact(payload: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in payload.items():
        if key in _REDACTED_KEYS and value:
            cleaned[key] = "***"
        elif isinstance(value, dict):
            cleaned[key] = _redact(value)
        else:
            cleaned[key] = value
    return cleaned


def _check(record: dict[str, Any]) -> None:
    """Raise ValueError naming the first field that breaks the record schema."""
    error = best_match(_validator().iter_errors(record))
    if error is not None:
        location = ".".join(str(part) for part in error.absolute_path) or "record"
        raise ValueError(f"Invalid telemetry {location}: {error.message}")


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    schema_resource = resources.files("mammoth.resources") / "telemetry.schema.json"
    with schema_resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))
