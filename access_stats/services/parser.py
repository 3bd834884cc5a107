"""
LogParser Classes - Handle parsing and normalization

This module parses raw access log lines into structured LogRecord objects.
One parser class exists per supported log format; the format is chosen once
by name (see get_parser) and every line of a run goes through that parser.
"""

import json
import re
from typing import Any, Dict, Optional, Tuple, Type

from access_stats.models.data_models import LogParseError, LogRecord
from access_stats.utils.helpers import parse_ts, safe_int, strip_query

MIN_STATUS = 100
MAX_STATUS = 599

ABSENT = "-"

# Field patterns, matched in order at the current scan position
_TOKEN_RE = re.compile(r"\s*(\S+)")
_BRACKETED_RE = re.compile(r"\s*\[([^\]]*)\]")
_QUOTED_RE = re.compile(r'\s*"((?:[^"\\]|\\.)*)"')


def _absent_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or value == ABSENT or value == "":
        return None
    return value


class BaseLogParser:
    """
    Shared validation for every access log format.
    Responsibilities:
    - Split and validate the request line
    - Validate status code and body size
    - Build the normalized LogRecord
    """

    name = ""

    def parse(self, line: str) -> LogRecord:
        raise NotImplementedError

    @staticmethod
    def split_request(request: str, line: str) -> Tuple[str, str, str]:
        """Split 'METHOD path HTTP/ver' into its three parts"""
        parts = request.split()
        if len(parts) != 3:
            raise LogParseError(
                "request",
                f"expected 'METHOD path HTTP/version', got {len(parts)} part(s) in {request!r}",
                line,
            )
        method, path, protocol = parts
        if not protocol.upper().startswith("HTTP/"):
            raise LogParseError("request", f"protocol {protocol!r} is not HTTP/<version>", line)
        return method, path, protocol

    @staticmethod
    def parse_status(raw: Any, line: str) -> int:
        status = safe_int(raw)
        if status is None:
            raise LogParseError("status", f"{raw!r} is not an integer", line)
        if not MIN_STATUS <= status <= MAX_STATUS:
            raise LogParseError(
                "status", f"{status} is outside [{MIN_STATUS}, {MAX_STATUS}]", line
            )
        return status

    @staticmethod
    def parse_body_size(raw: Any, line: str) -> int:
        # nginx writes '-' when no body was sent
        if raw == ABSENT:
            return 0
        size = safe_int(raw)
        if size is None:
            raise LogParseError("body_size", f"{raw!r} is not an integer", line)
        if size < 0:
            raise LogParseError("body_size", f"{size} is negative", line)
        return size

    def build_record(
        self,
        line: str,
        remote_address: str,
        remote_user: Optional[str],
        raw_timestamp: str,
        request: str,
        status_raw: Any,
        body_raw: Any,
        referrer: Optional[str],
        user_agent: Optional[str],
    ) -> LogRecord:
        method, path, protocol = self.split_request(request, line)
        return LogRecord(
            remote_address=remote_address,
            remote_user=_absent_to_none(remote_user),
            timestamp=parse_ts(raw_timestamp),
            raw_timestamp=raw_timestamp,
            method=method,
            path=path,
            endpoint=strip_query(path),
            protocol=protocol,
            status_code=self.parse_status(status_raw, line),
            body_size=self.parse_body_size(body_raw, line),
            referrer=_absent_to_none(referrer),
            user_agent=_absent_to_none(user_agent),
        )


class CombinedLogParser(BaseLogParser):
    """
    Parses the nginx/Apache combined log format:
    addr ident user [timestamp] "METHOD path HTTP/ver" status body "referrer" "agent"

    Referrer and agent may be quoted or bare, and may be missing altogether.
    Anything after the agent field is ignored.
    """

    name = "combined"

    def parse(self, line: str) -> LogRecord:
        text = line.strip()
        if not text:
            raise LogParseError("line", "empty line", line)

        pos = 0
        remote_address, pos = self._expect(_TOKEN_RE, text, pos, "remote_address", line)
        _ident, pos = self._expect(_TOKEN_RE, text, pos, "ident", line)
        remote_user, pos = self._expect(_TOKEN_RE, text, pos, "remote_user", line)
        raw_timestamp, pos = self._expect(_BRACKETED_RE, text, pos, "timestamp", line)
        request, pos = self._expect(_QUOTED_RE, text, pos, "request", line)
        status_raw, pos = self._expect(_TOKEN_RE, text, pos, "status", line)
        body_raw, pos = self._expect(_TOKEN_RE, text, pos, "body_size", line)
        referrer, pos = self._optional_field(text, pos)
        user_agent, pos = self._optional_field(text, pos)

        return self.build_record(
            line,
            remote_address=remote_address,
            remote_user=remote_user,
            raw_timestamp=raw_timestamp,
            request=request,
            status_raw=status_raw,
            body_raw=body_raw,
            referrer=referrer,
            user_agent=user_agent,
        )

    @staticmethod
    def _expect(
        pattern: "re.Pattern[str]", text: str, pos: int, field: str, line: str
    ) -> Tuple[str, int]:
        """Match one required field at pos, return (value, new position)"""
        m = pattern.match(text, pos)
        if m is None:
            if pos >= len(text):
                raise LogParseError(field, "missing", line)
            raise LogParseError(field, f"malformed near {text[pos:pos + 20].strip()!r}", line)
        return m.group(1), m.end()

    @staticmethod
    def _optional_field(text: str, pos: int) -> Tuple[Optional[str], int]:
        """Quoted or bare trailing field; (None, pos) when nothing is left"""
        m = _QUOTED_RE.match(text, pos) or _TOKEN_RE.match(text, pos)
        if m is None:
            return None, pos
        return m.group(1), m.end()

    @staticmethod
    def format_line(record: LogRecord) -> str:
        """Serialize a record back to a combined log line"""
        return '{} - {} [{}] "{} {} {}" {} {} "{}" "{}"'.format(
            record.remote_address,
            record.remote_user or ABSENT,
            record.raw_timestamp,
            record.method,
            record.path,
            record.protocol,
            record.status_code,
            record.body_size,
            record.referrer or ABSENT,
            record.user_agent or ABSENT,
        )


class JsonLogParser(BaseLogParser):
    """
    Parses one JSON object per line, as written by an nginx
    log_format with escape=json and the keys:
    time, remote_ip, remote_user, request, response, bytes, referrer, agent
    """

    name = "json"

    REQUIRED_KEYS = ("remote_ip", "request", "response", "bytes")

    def parse(self, line: str) -> LogRecord:
        text = line.strip()
        if not text:
            raise LogParseError("line", "empty line", line)

        try:
            raw = json.loads(text)
        except ValueError as e:
            # JSONDecodeError, or an integer literal too long to convert
            raise LogParseError("line", f"invalid JSON: {e}", line) from e
        if not isinstance(raw, dict):
            raise LogParseError("line", "expected a JSON object", line)

        for key in self.REQUIRED_KEYS:
            if raw.get(key) is None:
                raise LogParseError(key, "missing", line)

        return self.build_record(
            line,
            remote_address=str(raw["remote_ip"]),
            remote_user=self._opt_str(raw.get("remote_user")),
            raw_timestamp=str(raw.get("time") or ""),
            request=str(raw["request"]),
            status_raw=raw["response"],
            body_raw=raw["bytes"],
            referrer=self._opt_str(raw.get("referrer")),
            user_agent=self._opt_str(raw.get("agent")),
        )

    @staticmethod
    def _opt_str(x: Any) -> Optional[str]:
        return str(x) if x is not None else None


PARSERS: Dict[str, Type[BaseLogParser]] = {
    CombinedLogParser.name: CombinedLogParser,
    JsonLogParser.name: JsonLogParser,
}

DEFAULT_FORMAT = CombinedLogParser.name


def get_parser(name: str = DEFAULT_FORMAT) -> BaseLogParser:
    """Instantiate the parser registered for a log format name"""
    try:
        return PARSERS[name]()
    except KeyError:
        raise ValueError(
            f"unknown log format {name!r}; expected one of: {', '.join(sorted(PARSERS))}"
        ) from None
