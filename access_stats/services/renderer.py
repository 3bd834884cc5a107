"""
Report rendering

Formats a Report as the plain-text summary printed by the CLI.
"""

from typing import List, Optional

from access_stats.models.data_models import DistributionStats, EndpointValue, Report

NOT_AVAILABLE = "n/a"


def _partition_rows(report: Report, attr: str, fmt: str) -> List[str]:
    rows = []
    for label, stats in (
        ("All Requests", report.stats_all),
        ("Successful Requests", report.stats_success),
        ("Failed Requests", report.stats_failure),
    ):
        rows.append(f"  {label}: {_value(stats, attr, fmt)}")
    return rows


def _value(stats: DistributionStats, attr: str, fmt: str) -> str:
    if not stats.count:
        return NOT_AVAILABLE
    value = getattr(stats, attr)
    if fmt:
        return format(value, fmt)
    return str(int(value)) if value.is_integer() else str(value)


def _endpoint(ev: Optional[EndpointValue], unit: str) -> str:
    if ev is None:
        return NOT_AVAILABLE
    return f"{ev.endpoint} ({ev.value} {unit})"


def render_text(report: Report) -> str:
    """Human-readable multi-section summary"""
    lines = ["Status Codes:"]
    if report.status_counts:
        for status, count in report.status_counts.items():
            lines.append(f"  {status}: {count}")
    else:
        lines.append(f"  {NOT_AVAILABLE}")

    lines.append("Mean Bytes:")
    lines.extend(_partition_rows(report, "mean", ".2f"))
    lines.append("Median Bytes:")
    lines.extend(_partition_rows(report, "median", ""))
    lines.append("99th Percentile Bytes:")
    lines.extend(_partition_rows(report, "p99", ""))

    lines.append(f"Largest Endpoint: {_endpoint(report.largest_response_endpoint, 'bytes')}")
    lines.append(f"Most Errors Endpoint: {_endpoint(report.most_errors_endpoint, 'errors')}")
    lines.append(f"Parse Errors: {report.parse_error_count} of {report.total_lines} non-blank line(s)")
    return "\n".join(lines)
