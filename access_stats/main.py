from __future__ import annotations

import logging
import os
from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from access_stats.models.data_models import Report
from access_stats.services.aggregator import analyze_lines
from access_stats.services.parser import DEFAULT_FORMAT, BaseLogParser, get_parser
from access_stats.services.storage import LogStore

# ──────────────────────────────────────────────────────────────────────────────
# Config
# ──────────────────────────────────────────────────────────────────────────────

API_PREFIX = "/api"
LOG_FILE_PATH = os.getenv("ACCESS_LOG_FILE", "./data/access.log")
LOG_LEVEL = os.getenv("ACCESS_STATS_LOG_LEVEL", "INFO")

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

store = LogStore(LOG_FILE_PATH)

# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────


def resolve_parser(fmt: str) -> BaseLogParser:
    try:
        return get_parser(fmt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def report_response(report: Report) -> Dict[str, Any]:
    return {"report": report.as_dict()}


# ──────────────────────────────────────────────────────────────────────────────
# App
# ──────────────────────────────────────────────────────────────────────────────

app = FastAPI(title="Access Log Statistics")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # dev OK; lock down in prod
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ──────────────────────────────────────────────────────────────────────────────
# Upload endpoint
# ──────────────────────────────────────────────────────────────────────────────


@app.post(f"{API_PREFIX}/upload-log")
async def upload_log_file(file: UploadFile = File(...)) -> Dict[str, Any]:
    """
    Stores an access log (overwrite) so /report can analyze it later.
    """
    content = await file.read()
    try:
        saved = store.save_upload(content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"status": "ok", **saved}


# ──────────────────────────────────────────────────────────────────────────────
# Analysis
# ──────────────────────────────────────────────────────────────────────────────


@app.post(f"{API_PREFIX}/analyze")
async def analyze_upload(
    file: UploadFile = File(...),
    format: str = Query(DEFAULT_FORMAT),
) -> Dict[str, Any]:
    """
    Analyzes an uploaded access log without storing it.
    """
    parser = resolve_parser(format)

    content = await file.read()
    text = content.decode("utf-8", errors="replace")
    lines: List[str] = [ln for ln in text.splitlines() if ln.strip()]
    if not lines:
        raise HTTPException(status_code=400, detail="Empty file")

    return report_response(analyze_lines(lines, parser))


@app.get(f"{API_PREFIX}/report")
def stored_report(format: str = Query(DEFAULT_FORMAT)) -> Dict[str, Any]:
    parser = resolve_parser(format)

    if not store.exists():
        raise HTTPException(status_code=404, detail="No access log uploaded")

    try:
        report = analyze_lines(store.read_lines(), parser)
    except OSError as e:
        logger.error("Reading %s failed: %s", store.file_path, e)
        raise HTTPException(status_code=500, detail="Error reading log file") from e
    return report_response(report)


# ──────────────────────────────────────────────────────────────────────────────
# Health
# ──────────────────────────────────────────────────────────────────────────────


@app.get(f"{API_PREFIX}/health")
def health() -> Dict[str, Any]:
    return asdict(store.stat())
