"""Thiessen (Voronoi) polygons for labeled points, clipped to a boundary."""

from .config import ThiessenConfig, load_config
from .errors import (
    ClippingFailure, DeadlineExceeded, DegenerateInputError, InputError,
    InsufficientSitesError, OutputWriteError, PipelineAborted,
    PipelineCancelled, ThiessenError,
)
from .pipeline import (
    OutputPolygon, PipelineState, SiteCollection, ThiessenPipeline,
    ThiessenResult, generate_thiessen_polygons,
)
from .sinks import ListSink, PolygonSink

__version__ = "1.0.0"
