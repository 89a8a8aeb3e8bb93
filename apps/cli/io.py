"""CLI I/O helpers for atomic output writing."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from core.format.models import GenerationResult
from core.history.records import build_generated_record, generated_record_to_row


@dataclass(frozen=True)
class OutputPaths:
    """Fixed output artifact paths for a single generation."""

    payload: Path
    result: Path
    record: Path


def build_output_paths(out_dir: Path) -> OutputPaths:
    """Build fixed output file paths under out_dir."""

    return OutputPaths(
        payload=out_dir / "out.payload.txt",
        result=out_dir / "out.result.json",
        record=out_dir / "out.record.json",
    )


def existing_output_files(paths: OutputPaths) -> list[Path]:
    """Return existing output files among fixed artifact paths."""

    return [path for path in (paths.payload, paths.result, paths.record) if path.exists()]


def generation_payload(result: GenerationResult) -> dict[str, Any]:
    """JSON-ready view of a generation result including capacity verdicts."""

    payload = result.model_dump(mode="json")
    if result.capacity is not None:
        payload["capacity"]["within_capacity"] = result.capacity.within_capacity
        payload["capacity"]["message"] = result.capacity.message
    return payload


def write_generation_atomic(paths: OutputPaths, result: GenerationResult) -> None:
    """Write payload text, result JSON and history row using temporary files + replace."""

    paths.payload.parent.mkdir(parents=True, exist_ok=True)
    # Payload bytes are written verbatim; CRLF inside vCard/VEVENT must survive.
    _atomic_write_text(paths.payload, result.payload)
    _atomic_write_json(paths.result, generation_payload(result))
    _atomic_write_json(paths.record, generated_record_to_row(build_generated_record(result)))


def _atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f"{path.name}.",
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        json.dump(payload, tmp, ensure_ascii=False, sort_keys=True, separators=(",", ":"))

    tmp_path.replace(path)


def _atomic_write_text(path: Path, text: str) -> None:
    fd, raw_tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f"{path.name}.",
        suffix=".tmp",
    )
    os.close(fd)
    tmp_path = Path(raw_tmp_path)

    try:
        with tmp_path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        tmp_path.replace(path)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
        raise
