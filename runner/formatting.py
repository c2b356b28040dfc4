"""Formatting helpers for run statistics and result payloads (display only)."""

from __future__ import annotations

import json
import math
from typing import Any, List, Optional, Tuple

from runner.schema import RunStats

NOT_AVAILABLE = "N/A"
_BYTE_UNITS = ["Bytes", "KB", "MB", "GB"]


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _trim(value: float, places: int = 2) -> str:
    s = f"{value:.{places}f}"
    return s.rstrip("0").rstrip(".") if "." in s else s


def format_duration(duration_ms: Optional[float]) -> str:
    """125000 -> "2m 5s"; 4000 -> "4s"; missing or zero -> "N/A"."""
    if not duration_ms:
        return NOT_AVAILABLE
    seconds = _round_half_up(duration_ms / 1000)
    if seconds < 60:
        return f"{seconds}s"
    return f"{seconds // 60}m {seconds % 60}s"


def format_bytes(num_bytes: Optional[float]) -> str:
    """Scale to the largest unit not exceeding the value: 1536 -> "1.5 KB"."""
    if not num_bytes:
        return NOT_AVAILABLE
    i = 0
    while i < len(_BYTE_UNITS) - 1 and num_bytes >= 1024 ** (i + 1):
        i += 1
    scaled = round(num_bytes / (1024 ** i), 2)
    return f"{_trim(scaled)} {_BYTE_UNITS[i]}"


def format_percent(value: Optional[float]) -> str:
    return f"{(value or 0):.1f}%"


def format_number(value: Optional[float]) -> str:
    if value is None:
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return _trim(float(value), 4)


def format_timestamp(ts: Optional[str]) -> Optional[str]:
    """Return an ISO timestamp truncated to seconds (YYYY-MM-DDTHH:MM:SS)."""
    if not ts:
        return None
    s = str(ts)
    # 2025-12-12T10:58:23.123Z -> 2025-12-12T10:58:23
    if len(s) >= 19 and s[4] == "-" and s[10] == "T":
        return s[:19]
    return s


def stats_sections(stats: Optional[RunStats]) -> List[Tuple[str, List[Tuple[str, str]]]]:
    """
    Ordered (section, [(label, value), ...]) rows for the statistics tab.
    Every counter may be missing; missing counters render as N/A or 0.
    """
    if stats is None:
        return []
    return [
        ("Performance", [
            ("Duration", format_duration(stats.duration_millis)),
            ("Runtime", f"{format_number(stats.run_time_secs)}s"),
            ("Compute Units", format_number(stats.compute_units)),
        ]),
        ("Memory Usage", [
            ("Current", format_bytes(stats.mem_current_bytes)),
            ("Average", format_bytes(stats.mem_avg_bytes)),
            ("Peak", format_bytes(stats.mem_max_bytes)),
        ]),
        ("CPU Usage", [
            ("Current", format_percent(stats.cpu_current_usage)),
            ("Average", format_percent(stats.cpu_avg_usage)),
            ("Peak", format_percent(stats.cpu_max_usage)),
        ]),
        ("Network", [
            ("Received", format_bytes(stats.net_rx_bytes)),
            ("Transmitted", format_bytes(stats.net_tx_bytes)),
        ]),
    ]


def result_json(payload: Any) -> str:
    """Pretty JSON for copy / download; plain-text OUTPUT records pass through."""
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)
