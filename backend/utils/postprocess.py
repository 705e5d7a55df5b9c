"""Helpers to format compositor output for clients."""
import base64
import resource
import sys
from datetime import datetime, timezone
from typing import Dict


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_data_url(jpeg_bytes: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("ascii")


def build_metadata(processing_ms: int, result_size: int) -> Dict:
    """Timing and size summary returned alongside the composite."""
    return {
        "processingTime": f"{processing_ms}ms",
        "resultSize": result_size,
        "timestamp": utc_timestamp(),
    }


def memory_snapshot() -> Dict:
    """Peak (not current) resident memory and CPU time of this process.

    ``peakRss`` is the high-water mark in bytes since the process started.
    """
    usage = resource.getrusage(resource.RUSAGE_SELF)
    # ru_maxrss is kilobytes on Linux and bytes on macOS
    peak_rss = usage.ru_maxrss if sys.platform == "darwin" else usage.ru_maxrss * 1024
    return {
        "peakRss": peak_rss,
        "userCpuSeconds": round(usage.ru_utime, 3),
        "systemCpuSeconds": round(usage.ru_stime, 3),
    }
