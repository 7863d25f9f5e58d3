from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from semspace.logging import LOGGER
from semspace.sections import LAYOUT, SPARSE_VECTORS
from semspace.vectors.sparse_vector import SparseVector

from .semantic_space_layout import LayoutResult


@dataclass(frozen=True)
class LabeledVector:
    label: str
    vector: SparseVector


def _record_to_vector(record: Mapping[str, object], line_no: int) -> SparseVector:
    if "vector" in record:
        mapping = record["vector"]
        if not isinstance(mapping, dict):
            raise ValueError(f"line {line_no}: vector must be an object of index -> value")
        return SparseVector.from_mapping({int(idx): float(val) for idx, val in mapping.items()})
    if "indices" in record or "values" in record:
        indices = record.get("indices", [])
        values = record.get("values", [])
        if not isinstance(indices, list) or not isinstance(values, list):
            raise ValueError(f"line {line_no}: indices and values must be lists")
        if len(indices) != len(values):
            raise ValueError(f"line {line_no}: indices and values must have the same length")
        return SparseVector.from_pairs(zip((int(i) for i in indices), (float(v) for v in values)))
    raise ValueError(f"line {line_no}: record needs 'vector' or 'indices'/'values'")


def load_vectors(path: str) -> List[LabeledVector]:
    """Reads one JSON object per line; blank lines are skipped."""
    if not path:
        raise ValueError("path must be provided")
    records: List[LabeledVector] = []
    with open(path, "r", encoding="utf-8") as fp:
        for line_no, line in enumerate(fp, start=1):
            line = line.strip()
            if not line:
                continue
            record = json.loads(line)
            if not isinstance(record, dict):
                raise ValueError(f"line {line_no}: expected a JSON object")
            label = str(record.get("label", len(records)))
            records.append(LabeledVector(label=label, vector=_record_to_vector(record, line_no)))
    LOGGER.event(
        "vectors.load",
        section=SPARSE_VECTORS,
        data={"path": path, "vectors": len(records)},
    )
    return records


def layout_payload(result: LayoutResult, labels: Sequence[str] | None = None) -> Dict[str, object]:
    if labels is not None and len(labels) != len(result):
        raise ValueError("labels must hold one entry per point")
    isolated = set(result.isolated)
    return {
        "points": len(result),
        "landmarks": [
            {
                "cluster_id": landmark.cluster_id,
                "x": float(result.landmark_positions[idx][0]),
                "y": float(result.landmark_positions[idx][1]),
                "members": len(landmark.members),
            }
            for idx, landmark in enumerate(result.landmarks)
        ],
        "layout": [
            {
                "index": idx,
                "label": None if labels is None else labels[idx],
                "x": x,
                "y": y,
                "isolated": idx in isolated,
            }
            for idx, (x, y) in enumerate(result.positions.tolist())
        ],
    }


def save_layout(path: str, result: LayoutResult, labels: Sequence[str] | None = None) -> None:
    if not path:
        raise ValueError("path must be provided for layout export")
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    payload = layout_payload(result, labels)
    with open(path, "w", encoding="utf-8") as fp:
        json.dump(payload, fp, ensure_ascii=True, indent=2)
    LOGGER.event(
        "layout.save",
        section=LAYOUT,
        data={"path": path, "points": len(result), "isolated": len(result.isolated)},
    )
