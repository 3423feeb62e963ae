from __future__ import annotations

import math
import os
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from .calculation import compute_path_points
from .config import PathConfig, PointCalculationOptions
from .geometry import Vector
from .magnet import MagnetReference, magnet
from .models import (
    LookaheadKeyframe,
    Path,
    PointCalculationResult,
    SpeedKeyframe,
    make_control,
    make_end_control,
)
from .units import Quantity, UnitOfLength
from . import get_general_config
import logging

log = logging.getLogger(__name__)


app = FastAPI(title="Path Engine API", version="1.0.0")


class EndControlModel(BaseModel):
    x: float
    y: float
    heading: float = 0.0


class KeyframeModel(BaseModel):
    x_pos: float = Field(ge=0, lt=1)
    y_pos: float = Field(ge=0, le=1)
    follow_bent_rate: bool = True


class SegmentModel(BaseModel):
    # Cubic handles; empty for a linear segment
    handles: List[Tuple[float, float]] = Field(default_factory=list)
    end: EndControlModel
    speed_keyframes: List[KeyframeModel] = Field(default_factory=list)
    lookahead_keyframes: List[KeyframeModel] = Field(default_factory=list)


class PointsRequest(BaseModel):
    start: EndControlModel
    segments: List[SegmentModel]
    density: Optional[float] = Field(default=None, gt=0)
    uol: Optional[UnitOfLength] = None
    path_config: PathConfig = Field(default_factory=PathConfig)
    options: PointCalculationOptions = Field(default_factory=PointCalculationOptions)


class VectorModel(BaseModel):
    x: float
    y: float


class ReferenceModel(BaseModel):
    source: VectorModel
    heading: float


class MagnetRequest(BaseModel):
    target: VectorModel
    references: List[ReferenceModel] = Field(default_factory=list)
    threshold: float = Field(gt=0)


def build_path(req: PointsRequest) -> Path:
    """Turn a request body into a chained :class:`Path`.

    Raises:
        ValueError: If a segment has a handle count other than 0 or 2.
    """
    path = Path(req.path_config)
    start = make_end_control(req.start.x, req.start.y, req.start.heading)
    for i, seg in enumerate(req.segments):
        end = make_end_control(seg.end.x, seg.end.y, seg.end.heading)
        first = start if i == 0 else None
        if len(seg.handles) == 0:
            segment = path.add_linear_segment(end, start=first)
        elif len(seg.handles) == 2:
            (x1, y1), (x2, y2) = seg.handles
            segment = path.add_cubic_segment(make_control(x1, y1), make_control(x2, y2), end, start=first)
        else:
            raise ValueError(f"Segment {i} must have 0 or 2 handles, got {len(seg.handles)}")

        for kf in seg.speed_keyframes:
            segment.add_speed_keyframe(SpeedKeyframe(kf.x_pos, kf.y_pos, kf.follow_bent_rate))
        for kf in seg.lookahead_keyframes:
            segment.add_lookahead_keyframe(LookaheadKeyframe(kf.x_pos, kf.y_pos, kf.follow_bent_rate))
    return path


def _finite(value: float) -> Optional[float]:
    # JSON has no infinity
    return value if math.isfinite(value) else None


def serialize_result(path: Path, result: PointCalculationResult) -> dict:
    segment_numbers = {segment.uid: i for i, segment in enumerate(path.segments)}

    def keyframes(indexes):
        return [
            {
                "index": ikf.index,
                "segment": segment_numbers[ikf.segment.uid] if ikf.segment is not None else None,
                "x_pos": ikf.keyframe.x_pos,
                "y_pos": ikf.keyframe.y_pos,
            }
            for ikf in indexes
        ]

    return {
        "arc_length": result.arc_length,
        "points": [
            {
                "x": p.x,
                "y": p.y,
                "speed": p.speed,
                "lookahead": p.lookahead,
                "heading": p.heading,
                "is_last": p.is_last,
                "bent_rate": _finite(p.bent_rate),
                "segment": segment_numbers[p.sample_ref.uid] if p.sample_ref is not None else None,
                "sample_t": p.sample_t,
            }
            for p in result.points
        ],
        "segment_indexes": [{"index": b.index, "from": b.from_, "to": b.to} for b in result.segment_indexes],
        "speed_keyframe_indexes": keyframes(result.speed_keyframe_indexes),
        "lookahead_keyframe_indexes": keyframes(result.lookahead_keyframe_indexes),
    }


@app.get("/api/ping")
async def ping():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@app.post("/api/points")
async def points(req: PointsRequest):
    gc = get_general_config()
    density = Quantity(
        req.density if req.density is not None else gc.point_density,
        req.uol if req.uol is not None else gc.uol
    )
    try:
        path = build_path(req)
        result = compute_path_points(path, density, req.options)
        return serialize_result(path, result)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        log.exception("Point calculation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/magnet")
async def snap(req: MagnetRequest):
    refs = [MagnetReference(Vector(r.source.x, r.source.y), r.heading) for r in req.references]
    try:
        position, used = magnet(Vector(req.target.x, req.target.y), refs, req.threshold)
    except Exception as e:
        log.exception("Magnet failed")
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "position": {"x": position.x, "y": position.y},
        "references": [next(i for i, r in enumerate(refs) if r is ref) for ref in used],
    }


def main():
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=int(os.getenv("PORT", 8002)))

if __name__ == "__main__":
    main()
