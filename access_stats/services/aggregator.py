"""
Aggregator Class - Computes metrics and statistics

This module aggregates LogRecords into a Report in a single streaming pass.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from access_stats.models.data_models import (
    DistributionStats,
    EndpointValue,
    LogParseError,
    LogRecord,
    Report,
)
from access_stats.services.parser import BaseLogParser, get_parser
from access_stats.utils.helpers import median, nearest_rank

logger = logging.getLogger(__name__)

P99 = 99


class RunningDistribution:
    """
    Body-size samples for one partition of requests (all / success / failure).
    Every sample is retained, so percentiles are exact.
    """

    def __init__(self) -> None:
        self.count = 0
        self.total = 0
        self._samples: List[int] = []

    def add(self, value: int) -> None:
        self.count += 1
        self.total += value
        self._samples.append(value)

    def summary(self) -> DistributionStats:
        """Mean / median / p99 over the retained samples (all zero when empty)"""
        if not self.count:
            return DistributionStats(mean=0.0, median=0.0, p99=0.0, count=0)

        ordered = sorted(self._samples)
        return DistributionStats(
            mean=self.total / self.count,
            median=median(ordered),
            p99=nearest_rank(ordered, P99),
            count=self.count,
        )


@dataclass
class EndpointStats:
    """Running per-endpoint aggregate"""
    requests: int = 0
    max_body_size: int = 0
    error_count: int = 0


class Aggregator:
    """
    Aggregates LogRecords into a Report.
    Responsibilities:
    - Count status codes
    - Maintain the all / success / failure distributions
    - Track per-endpoint max body size and error count
    - Count lines rejected by the parser
    """

    def __init__(self) -> None:
        self.status_counts: Dict[int, int] = {}
        self.all = RunningDistribution()
        self.success = RunningDistribution()
        self.failure = RunningDistribution()
        self.endpoints: Dict[str, EndpointStats] = {}
        self.parse_error_count = 0

        # Leaders only change on a strictly greater value, so the first
        # endpoint to reach a value keeps it on ties.
        self._largest: Optional[EndpointValue] = None
        self._most_errors: Optional[EndpointValue] = None

    def ingest(self, record: LogRecord) -> None:
        """Fold one parsed record into the running state"""
        status = record.status_code
        self.status_counts[status] = self.status_counts.get(status, 0) + 1

        # Partition by status
        self.all.add(record.body_size)
        if record.is_error:
            self.failure.add(record.body_size)
        else:
            self.success.add(record.body_size)

        # Per-endpoint stats
        stats = self.endpoints.get(record.endpoint)
        if stats is None:
            stats = self.endpoints[record.endpoint] = EndpointStats()
        stats.requests += 1
        if record.body_size > stats.max_body_size:
            stats.max_body_size = record.body_size
        if record.is_error:
            stats.error_count += 1

        # Extrema
        if self._largest is None or record.body_size > self._largest.value:
            self._largest = EndpointValue(record.endpoint, record.body_size)
        if record.is_error and (
            self._most_errors is None or stats.error_count > self._most_errors.value
        ):
            self._most_errors = EndpointValue(record.endpoint, stats.error_count)

    def record_parse_error(self, error: LogParseError) -> None:
        """Count a line the parser rejected"""
        self.parse_error_count += 1

    def finalize(self) -> Report:
        """Build the Report from the current state. Never fails."""
        return Report(
            status_counts=dict(sorted(self.status_counts.items())),
            stats_all=self.all.summary(),
            stats_success=self.success.summary(),
            stats_failure=self.failure.summary(),
            largest_response_endpoint=self._largest,
            most_errors_endpoint=self._most_errors,
            parse_error_count=self.parse_error_count,
        )


def analyze_lines(
    lines: Iterable[str], parser: Optional[BaseLogParser] = None
) -> Report:
    """
    Run one ingestion pass over raw log lines.
    Unparseable lines are counted and skipped; errors raised by the line
    source itself (I/O) propagate to the caller.
    """
    parser = parser or get_parser()
    aggregator = Aggregator()

    for lineno, line in enumerate(lines, start=1):
        try:
            record = parser.parse(line)
        except LogParseError as e:
            logger.debug("Skipping line %d (%s): %s", lineno, parser.name, e)
            aggregator.record_parse_error(e)
            continue
        aggregator.ingest(record)

    report = aggregator.finalize()
    logger.info(
        "Analyzed %d line(s): %d parsed, %d skipped",
        report.total_lines,
        report.parsed_lines,
        report.parse_error_count,
    )
    if report.parse_error_count:
        logger.warning("%d line(s) could not be parsed", report.parse_error_count)
    return report
