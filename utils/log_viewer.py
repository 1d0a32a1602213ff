from __future__ import annotations

import glob
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

from utils.logging_utils import LOG_BASENAME, resolve_dir

LOG_GLOB = f"{LOG_BASENAME}*.log"


def resolve_log_dir(config) -> str:
    return resolve_dir(config.get_option("LOG", "dir", "logs") if config is not None else None)


def resolve_log_files(config, explicit: Optional[str] = None) -> List[str]:
    """Explicit file, else ``[LOG] file``, else every per-run log sorted by mtime."""
    log_dir = resolve_log_dir(config)
    name = explicit or (config.get_option("LOG", "file", "") if config is not None else "")
    if name:
        name = os.path.expanduser(str(name))
        return [name if os.path.isabs(name) else os.path.join(log_dir, name)]
    files = glob.glob(os.path.join(log_dir, LOG_GLOB))
    return sorted(files, key=os.path.getmtime)


@dataclass
class ParsedLine:
    raw: str
    payload: Optional[Dict[str, Any]]


def _parse_jsonl_line(line: str) -> ParsedLine:
    raw = line.rstrip("\n")
    if not raw.strip():
        return ParsedLine(raw=raw, payload=None)
    try:
        obj = json.loads(raw)
    except ValueError:
        return ParsedLine(raw=raw, payload=None)
    if not isinstance(obj, dict):
        return ParsedLine(raw=raw, payload=None)
    return ParsedLine(raw=raw, payload=obj)


def iter_log_lines(paths: Iterable[str]) -> Iterator[ParsedLine]:
    for path in paths:
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    pl = _parse_jsonl_line(line)
                    if pl.raw.strip():
                        yield pl
        except OSError:
            continue


def _match(payload: Dict[str, Any], *, where: Dict[str, str]) -> bool:
    data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
    for key, expected in where.items():
        # "data.foo" reads the payload data; bare keys try top-level then data
        if key.startswith("data."):
            val = data.get(key[5:])
        else:
            val = payload.get(key)
            if val is None:
                val = data.get(key)
        if val is None or str(val) != expected:
            return False
    return True


def format_line(payload: Dict[str, Any]) -> str:
    ts = payload.get("ts") or ""
    event = payload.get("event") or ""
    comp = payload.get("component") or ""
    asp = payload.get("aspect") or ""
    sev = payload.get("severity") or ""
    data = payload.get("data") if isinstance(payload.get("data"), dict) else {}

    extras = []
    for key in ("method", "status", "ticket", "elapsed_ms", "error"):
        if data.get(key) not in (None, ""):
            extras.append(f"{key}={data[key]}")

    base = f"{ts} {sev} {asp}:{event} {comp}"
    return base + ((" " + " ".join(extras)) if extras else "")


def show_events(
    *,
    paths: Iterable[str],
    limit: int = 200,
    where: Optional[Dict[str, str]] = None,
    json_output: bool = False,
) -> List[str]:
    """Matching records in file order, at most ``limit`` of the most recent."""
    out: List[str] = []
    for pl in iter_log_lines(paths):
        if pl.payload is None:
            continue
        if not _match(pl.payload, where=where or {}):
            continue
        out.append(pl.raw if json_output else format_line(pl.payload))
    if limit and len(out) > int(limit):
        out = out[-int(limit):]
    return out
