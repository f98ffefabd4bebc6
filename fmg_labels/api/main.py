"""FastAPI main application."""

import logging

from typing import List, Optional, Tuple

import structlog

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config import settings
from ..core.labels import Label, LabelStore
from ..core.map_context import Feature, MapContext, State
from ..core.render import render_svg
from ..core.state_labels import LabelOptions, StateLabelsGenerator
from ..core.text_fitting import LabelMode
from ..core.text_metrics import FixedWidthMeasurer
from ..db.connection import db
from ..db.store import SqlLabelStore

# Configure logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

renderer = (
    structlog.processors.JSONRenderer()
    if settings.log_format == "json"
    else structlog.dev.ConsoleRenderer(colors=False)
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        renderer,
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="FMG Labels API",
    description="Curved state label placement for fantasy maps",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class FeaturePayload(BaseModel):
    """Geographic feature referenced by cells."""

    id: int
    type: str = Field(description="ocean, lake or island")
    cells: int = Field(ge=0, description="Number of cells in the feature")
    land: bool = False
    shoreline: List[int] = Field(default_factory=list, description="Lake shoreline cells")


class StatePayload(BaseModel):
    """Political state to label."""

    id: int
    name: str
    full_name: str = ""
    pole: Optional[Tuple[float, float]] = None
    cells: int = 0
    removed: bool = False
    locked: bool = False


class MapPayload(BaseModel):
    """Packed map data required for label placement."""

    width: float = Field(gt=0, description="Canvas width")
    height: float = Field(gt=0, description="Canvas height")
    points: List[Tuple[float, float]] = Field(min_length=1, description="Cell centers")
    cell_state: List[int] = Field(description="State id of each cell")
    cell_feature: List[int] = Field(description="Feature id of each cell")
    features: List[Optional[FeaturePayload]] = Field(description="Features, index 0 reserved")
    states: List[StatePayload]


class StateLabelsRequest(BaseModel):
    """Request to (re)generate state labels."""

    map: MapPayload
    mode: LabelMode = Field(default=settings.label_mode)
    angle_step: float = Field(default=settings.angle_step, gt=0)
    state_ids: Optional[List[int]] = Field(
        default=None, description="Regenerate only these states"
    )
    labels: List[Label] = Field(default_factory=list, description="Existing labels")
    map_id: Optional[str] = Field(
        default=None, description="Read and save labels of this stored map instead of 'labels'"
    )
    letter_width: float = Field(default=settings.letter_width, gt=0)
    line_height: float = Field(default=settings.line_height, gt=0)


class StateLabelsResponse(BaseModel):
    """Labels after regeneration together with the pass report."""

    labels: List[Label]
    generated: List[int]
    degenerate: List[int]
    unmeasured: List[int]
    fallbacks: List[int]
    svg: Optional[str] = None


def build_context(payload: MapPayload) -> MapContext:
    features = [
        Feature(id=f.id, type=f.type, cells=f.cells, land=f.land, shoreline=f.shoreline)
        if f else None
        for f in payload.features
    ]
    states = {s.id: State(**s.model_dump()) for s in payload.states}
    return MapContext(
        width=payload.width,
        height=payload.height,
        points=payload.points,
        cell_state=payload.cell_state,
        feature_ids=payload.cell_feature,
        features=features,
        states=states,
    )


# Event handlers
@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    logger.info("Starting FMG Labels API")
    db.initialize()
    logger.info("API startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down FMG Labels API")


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "FMG Labels API", "version": "0.1.0"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/labels/states", response_model=StateLabelsResponse)
async def generate_state_labels(request: StateLabelsRequest, svg: bool = False):
    """Generate state labels, keeping existing labels of other states."""
    try:
        context = build_context(request.map)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if request.map_id is not None:
        if request.labels:
            raise HTTPException(
                status_code=400, detail="Send either labels or map_id, not both"
            )
        store = SqlLabelStore(db, request.map_id)
    else:
        try:
            store = LabelStore(request.labels)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    options = LabelOptions(mode=request.mode, angle_step=request.angle_step)
    measurer = FixedWidthMeasurer(request.letter_width, request.line_height)
    generator = StateLabelsGenerator(context, measurer, options)

    logger.info("State labels requested", states=len(context.states), mode=request.mode)
    report = generator.regenerate(store, request.state_ids)

    labels = store.all()
    return StateLabelsResponse(
        labels=labels,
        generated=report.generated,
        degenerate=report.degenerate,
        unmeasured=report.unmeasured,
        fallbacks=report.fallbacks,
        svg=render_svg(labels, context.width, context.height) if svg else None,
    )


@app.get("/maps/{map_id}/labels", response_model=List[Label])
async def get_map_labels(map_id: str, label_type: Optional[str] = None):
    """Get stored labels of a map, optionally of one type."""
    store = SqlLabelStore(db, map_id)
    return store.get_by_type(label_type) if label_type else store.all()


@app.delete("/maps/{map_id}/labels")
async def clear_map_labels(map_id: str):
    """Delete all stored labels of a map."""
    store = SqlLabelStore(db, map_id)
    count = len(store)
    store.clear()
    logger.info("Cleared stored labels", map_id=map_id, count=count)
    return {"map_id": map_id, "removed": count}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
