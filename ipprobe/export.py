"""JSON and CSV export for lookup and probe results."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import asdict, is_dataclass
from typing import Any, Iterable

from ipprobe.display import classify
from ipprobe.models import GeoRecord, ProbeResult, Resolution


def export_json(obj: Any, indent: int = 2) -> str:
    """Export a result (or list of results) as a JSON string."""
    return json.dumps(_to_serializable(obj), indent=indent, default=str)


def export_csv(results: Iterable[ProbeResult]) -> str:
    """Export probe results as CSV (one row per target)."""
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(["name", "duration_ms", "success", "tier", "status_code", "error"])
    for r in results:
        writer.writerow([
            r.name,
            f"{r.duration_ms:.2f}",
            r.success,
            classify(r).value,
            r.status_code if r.status_code is not None else "",
            r.error or "",
        ])

    return output.getvalue()


def write_to_file(content: str, filepath: str) -> None:
    """Write export content to a file."""
    with open(filepath, "w") as f:
        f.write(content)


def _to_serializable(obj: Any) -> Any:
    if isinstance(obj, Resolution):
        return {
            "domain": obj.domain,
            "address": obj.address if obj.answers else None,
            "answers": [
                {"name": a.name, "type": a.type_name, "ttl": a.ttl, "data": a.data}
                for a in obj.answers
            ],
        }
    if isinstance(obj, GeoRecord):
        return {"ip": obj.ip, "source": obj.source, "data": obj.data}
    if isinstance(obj, ProbeResult):
        data = asdict(obj)
        data["tier"] = classify(obj).value
        return data
    if isinstance(obj, dict):
        return {k: _to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_serializable(v) for v in obj]
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    return obj
