"""
Data Models (DTOs - Data Transfer Objects)

This module contains all dataclass definitions used throughout the application.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


class LogParseError(ValueError):
    """Raised when a single access log line cannot be turned into a LogRecord"""

    def __init__(self, field: str, reason: str, line: str = ""):
        self.field = field
        self.reason = reason
        self.line = line
        super().__init__(f"{field}: {reason}")


@dataclass(frozen=True)
class LogRecord:
    """Represents a single well-formed access log line"""
    remote_address: str
    remote_user: Optional[str]
    timestamp: Optional[datetime]
    raw_timestamp: str
    method: str
    path: str
    endpoint: str
    protocol: str
    status_code: int
    body_size: int
    referrer: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


@dataclass(frozen=True)
class DistributionStats:
    """Mean / median / p99 over one partition of requests"""
    mean: float
    median: float
    p99: float
    count: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mean": self.mean,
            "median": self.median,
            "p99": self.p99,
            "count": self.count,
        }


@dataclass(frozen=True)
class EndpointValue:
    """An endpoint tagged with the value that made it stand out"""
    endpoint: str
    value: int


@dataclass(frozen=True)
class Report:
    """Final statistics for one ingestion pass"""
    status_counts: Dict[int, int]
    stats_all: DistributionStats
    stats_success: DistributionStats
    stats_failure: DistributionStats
    largest_response_endpoint: Optional[EndpointValue]
    most_errors_endpoint: Optional[EndpointValue]
    parse_error_count: int

    @property
    def parsed_lines(self) -> int:
        return sum(self.status_counts.values())

    @property
    def total_lines(self) -> int:
        return self.parsed_lines + self.parse_error_count

    def as_dict(self) -> Dict[str, Any]:
        largest = self.largest_response_endpoint
        most_errors = self.most_errors_endpoint
        return {
            # JSON object keys must be strings
            "status_counts": {str(k): v for k, v in self.status_counts.items()},
            "stats_all": self.stats_all.as_dict(),
            "stats_success": self.stats_success.as_dict(),
            "stats_failure": self.stats_failure.as_dict(),
            "largest_response_endpoint": (
                {"endpoint": largest.endpoint, "body_size": largest.value}
                if largest
                else None
            ),
            "most_errors_endpoint": (
                {"endpoint": most_errors.endpoint, "error_count": most_errors.value}
                if most_errors
                else None
            ),
            "parse_error_count": self.parse_error_count,
            "total_lines": self.total_lines,
        }


@dataclass
class HealthStatus:
    """Health check response"""
    status: str
    log_file_exists: bool
    path: str
    size_bytes: int
    total_lines: int
