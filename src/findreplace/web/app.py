"""FastAPI application backing the FindReplace web UI."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from findreplace.config import AppConfig
from findreplace.history.store import SQLiteHistoryStore
from findreplace.models import RunSummary
from findreplace.replace.engine import ReplaceEngine, summary_from_scan
from findreplace.replace.scanner import build_preview
from findreplace.utils.text import EmptySearchError, normalize_replacement, normalize_search
from findreplace.web.frontend import router as frontend_router

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="FindReplace Web", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(frontend_router)


class PreviewPayload(BaseModel):
    paths: List[str]
    find: str
    limit: int = 150


class ReplacePayload(BaseModel):
    paths: List[str]
    find: str
    replace: str = ""
    save_history: bool = True
    history: str | None = None


def _resolve_history_path(history: Path | None) -> Path:
    config = AppConfig(history_path=history if history is not None else AppConfig().history_path)
    return config.resolve_history_path(Path.cwd())


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _safe_base_dir() -> Path:
    # Canonical path so symlinks cannot be used to escape the base.
    return Path(os.path.realpath(str(Path.home())))


def _validate_paths(raw_paths: List[str]) -> List[Path]:
    """Sanitise and canonicalise request paths, keeping them under the home directory.

    Paths that do not exist are dropped; they contribute no files.
    """
    safe_base_str = str(_safe_base_dir()) + os.sep
    validated: List[Path] = []
    for raw in raw_paths:
        clean_path = raw.strip().replace("\r", "").replace("\n", "")
        if not clean_path:
            continue
        if "\0" in clean_path:
            raise HTTPException(status_code=400, detail="Invalid path: contains null byte")

        real_path = os.path.realpath(os.path.expanduser(clean_path))
        if not os.path.isabs(real_path):
            raise HTTPException(status_code=400, detail="Invalid path: must be absolute")
        if not (real_path + os.sep).startswith(safe_base_str):
            raise HTTPException(
                status_code=403,
                detail="Access denied: path is outside allowed directory",
            )

        path = Path(real_path)
        if not path.exists():
            LOGGER.info("Ignoring missing path %s", clean_path)
            continue
        validated.append(path)

    return validated


def _normalized_search(find: str) -> str:
    try:
        return normalize_search(find)
    except EmptySearchError as exc:
        raise HTTPException(status_code=400, detail="Empty search") from exc


def _summary_to_dict(summary: RunSummary) -> dict[str, Any]:
    data = asdict(summary)
    data["failures"] = [
        {"path": str(failure.path), "reason": failure.reason, "kind": failure.kind}
        for failure in summary.failures
    ]
    data["changed_files"] = [str(path) for path in summary.changed_files]
    data["failed"] = summary.failed
    return data


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/preview")
async def preview_matches(payload: PreviewPayload) -> dict[str, Any]:
    find = _normalized_search(payload.find)
    if not payload.paths:
        raise HTTPException(status_code=400, detail="No path provided")

    paths = _validate_paths(payload.paths)
    config = AppConfig()
    engine = ReplaceEngine(encodings=config.encodings)
    targets = await asyncio.to_thread(engine.resolve, paths)
    if not targets:
        return {"status": "no_files", "files_scanned": 0, "entries": []}

    report = await asyncio.to_thread(engine.scan, targets, find)
    preview = build_preview(report, max(1, min(payload.limit, 1000)))
    return {
        "status": "ok",
        "files_scanned": report.files_scanned,
        "files_matched": preview.files_matched,
        "total_occurrences": preview.total_occurrences,
        "unreadable_count": preview.unreadable_count,
        "hidden_count": preview.hidden_count,
        "entries": [{"path": str(entry.path), "count": entry.count} for entry in preview.entries],
    }


def _run_replace_job(targets: List[Path], find: str, replacement: str) -> RunSummary:
    engine = ReplaceEngine(encodings=AppConfig().encodings)
    report = engine.scan(targets, find)
    return engine.apply(report.matches, find, replacement, summary=summary_from_scan(report))


@app.post("/replace")
async def replace_text(payload: ReplacePayload) -> dict[str, Any]:
    find = _normalized_search(payload.find)
    replacement = normalize_replacement(payload.replace)
    if not payload.paths:
        raise HTTPException(status_code=400, detail="No path provided")

    paths = _validate_paths(payload.paths)
    targets = await asyncio.to_thread(ReplaceEngine().resolve, paths)
    if not targets:
        return {"status": "no_files", "summary": _summary_to_dict(RunSummary())}

    if payload.save_history:
        history_path = _resolve_history_path(Path(payload.history) if payload.history else None)
        _ensure_parent(history_path)
        store = SQLiteHistoryStore(history_path, max_items=AppConfig().history_size)
        try:
            store.save(find, replacement)
        finally:
            store.close()

    try:
        summary = await asyncio.to_thread(_run_replace_job, targets, find, replacement)
    except Exception as exc:  # pragma: no cover - defensive
        LOGGER.exception("Replace failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return {"status": "ok", "summary": _summary_to_dict(summary)}


@app.get("/history")
async def list_history(history: Path | None = None) -> dict[str, Any]:
    """Recently used search and replacement texts."""
    history_path = _resolve_history_path(history)
    if not history_path.exists():
        return {"finds": [], "replaces": []}

    store = SQLiteHistoryStore(history_path, max_items=AppConfig().history_size)
    try:
        return {"finds": store.load_finds(), "replaces": store.load_replaces()}
    finally:
        store.close()
