"""
Report rendering

Turns aggregation snapshots into the human-readable summary or a JSON
document. All derived figures are rounded to one decimal place.
"""
import json
import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .aggregator import RegionSummary


def kelvin_to_fahrenheit(kelvin: float) -> float:
    """Convert Kelvin to Fahrenheit"""
    return (kelvin - 273.15) * 9 / 5 + 32


def _fmt(value: Optional[float], suffix: str) -> str:
    if value is None:
        return "n/a"
    return f"{value:.1f}{suffix}"


def _fahrenheit(kelvin: Optional[float]) -> Optional[float]:
    if kelvin is None:
        return None
    return kelvin_to_fahrenheit(kelvin)


def _ctime(timestamp: Optional[int]) -> str:
    if timestamp is None:
        return "n/a"
    try:
        return time.ctime(timestamp)
    except (OverflowError, ValueError, OSError):
        return "n/a"


def _extreme(summary: RegionSummary, value: float) -> Optional[float]:
    # Untouched extremes are still +/-inf
    if summary.record_count == 0:
        return None
    return value


def render_region(summary: RegionSummary) -> List[str]:
    """
    Render the report block for one region
    
    Args:
        summary: Region snapshot
    
    Returns:
        Report lines without trailing newlines
    """
    max_f = _fahrenheit(_extreme(summary, summary.max_temp))
    min_f = _fahrenheit(_extreme(summary, summary.min_temp))
    
    return [
        f"-- State: {summary.code} --",
        f"Number of Records: {summary.record_count}",
        f"Average Humidity: {_fmt(summary.mean_humidity, '%')}",
        f"Average Temperature: {_fmt(_fahrenheit(summary.mean_temperature), 'F')}",
        f"Max Temperature: {_fmt(max_f, 'F')}",
        f"Max Temperature on: {_ctime(summary.max_temp_at)}",
        f"Min Temperature: {_fmt(min_f, 'F')}",
        f"Min Temperature on: {_ctime(summary.min_temp_at)}",
        f"Lightning Strikes: {summary.lightning_count}",
        f"Records with Snow Cover: {summary.snow_count}",
        f"Average Cloud Cover: {_fmt(summary.mean_cloud_cover, '%')}",
    ]


def render_text(summaries: Iterable[RegionSummary]) -> str:
    """
    Render the plain-text report
    
    Args:
        summaries: Region snapshots in report order
    
    Returns:
        Report text ending in a newline
    """
    summaries = list(summaries)
    
    lines = ["States found: " + "".join(f"{s.code} " for s in summaries)]
    for summary in summaries:
        lines.extend(render_region(summary))
    
    return "\n".join(lines) + "\n"


def _round(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(value, 1)


def _isoformat(timestamp: Optional[int]) -> Optional[str]:
    if timestamp is None:
        return None
    try:
        return datetime.fromtimestamp(timestamp).isoformat()
    except (OverflowError, ValueError, OSError):
        return None


def region_to_dict(summary: RegionSummary) -> Dict[str, Any]:
    """Derived report figures for one region"""
    return {
        "region": summary.code,
        "record_count": summary.record_count,
        "mean_humidity_pct": _round(summary.mean_humidity),
        "mean_temperature_f": _round(_fahrenheit(summary.mean_temperature)),
        "max_temperature_f": _round(_fahrenheit(_extreme(summary, summary.max_temp))),
        "max_temperature_at": _isoformat(summary.max_temp_at),
        "min_temperature_f": _round(_fahrenheit(_extreme(summary, summary.min_temp))),
        "min_temperature_at": _isoformat(summary.min_temp_at),
        "lightning_strikes": summary.lightning_count,
        "snow_records": summary.snow_count,
        "mean_cloud_cover_pct": _round(summary.mean_cloud_cover),
    }


def render_json(summaries: Iterable[RegionSummary]) -> str:
    """
    Render the report as a JSON document
    
    Args:
        summaries: Region snapshots in report order
    
    Returns:
        JSON text ending in a newline
    """
    regions = [region_to_dict(s) for s in summaries]
    document = {
        "regions_found": [r["region"] for r in regions],
        "regions": regions,
    }
    return json.dumps(document, indent=2, default=str) + "\n"


RENDERERS = {
    "text": render_text,
    "json": render_json,
}


def render(summaries: Iterable[RegionSummary], report_format: str = "text") -> str:
    """
    Render a report in the requested format
    
    Raises:
        ValueError: Unknown report format
    """
    if report_format not in RENDERERS:
        raise ValueError(
            f"Unknown report format: {report_format}. "
            f"Must be one of {list(RENDERERS.keys())}"
        )
    return RENDERERS[report_format](summaries)
