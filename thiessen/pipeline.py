"""
Thiessen polygon pipeline.

Stages run strictly in order, each one exactly once per pipeline object:

    ingest -> build_triangulation -> derive_cells -> clip -> emit

Any error moves the pipeline to ABORTED. Per-site clipping failures are
the exception: the site is skipped and a warning is recorded.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from enum import Enum
from typing import Any, List, NamedTuple, Optional, Tuple

import structlog

from .config import ThiessenConfig
from .errors import (
    ClippingFailure, DeadlineExceeded, InputError, OutputWriteError,
    PipelineCancelled,
)
from .lib.boundary import load_boundary
from .lib.clipper import clip_ring
from .lib.polygon import rings_area
from .lib.sites import ingest_sites
from .lib.triangulation import build_triangulation
from .lib.voronoi import derive_cells
from .sinks import ListSink

logger = structlog.get_logger()


class PipelineState(Enum):
    IDLE = "idle"
    INGESTED = "ingested"
    TRIANGULATED = "triangulated"
    CELLS_BUILT = "cells_built"
    CLIPPED = "clipped"
    EMITTED = "emitted"
    DONE = "done"
    ABORTED = "aborted"


class SiteCollection(NamedTuple):
    """Site records plus the metadata that travels with them."""
    records: Any
    spatial_reference: Any = None
    attribute_name: Optional[str] = None


class OutputPolygon(NamedTuple):
    """Clipped Thiessen polygon of one site."""
    site_id: int
    attribute: Any
    rings: Tuple[Tuple[Tuple[float, float], ...], ...]

    @property
    def area(self):
        return rings_area(self.rings)


class ThiessenResult(NamedTuple):
    polygons: List[OutputPolygon]
    spatial_reference: Any
    warnings: List[str]
    input_count: int
    site_count: int


def bind_attributes(sites, clipped):
    """Pair each site's attribute with its clipped rings.

    Sites whose cell missed the boundary (no rings) produce no record.
    """
    return [OutputPolygon(site.id, site.attribute, tuple(tuple(r) for r in rings))
            for site, rings in zip(sites, clipped) if rings]


def _materialize(records):
    if records is None:
        return None
    try:
        return list(records)
    except TypeError as e:
        raise InputError('site collection is not iterable') from e


class ThiessenPipeline:
    """Explicitly composed stages of one Thiessen polygon run."""

    def __init__(self, config=None, sink=None, cancel_event=None):
        self.config = config if config is not None else ThiessenConfig()
        self.sink = sink if sink is not None else ListSink()
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()
        self.state = PipelineState.IDLE
        self.warnings = []

        self.sites = None
        self.boundary = None
        self.mesh = None
        self.cells = None
        self.clipped = None
        self.polygons = None
        self.input_count = 0
        self.spatial_reference = None
        self.attribute_name = None
        self._deadline = None

    # -- helpers ----------------------------------------------------------

    def _warn(self, message, **fields):
        logger.warning(message, **fields)
        self.warnings.append(message)

    def _check_deadline(self):
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise DeadlineExceeded(
                f'deadline of {self.config.deadline_seconds}s passed before entering the next stage after {self.state.value}')

    @contextmanager
    def _stage(self, expected, target):
        if self.state is not expected:
            raise RuntimeError(
                f'cannot move to {target.value} from {self.state.value}')
        try:
            self._check_deadline()
            yield
        except BaseException:
            self.state = PipelineState.ABORTED
            raise
        self.state = target

    # -- stages -----------------------------------------------------------

    def ingest(self, sites, boundary):
        """Load the boundary and normalize the site records."""
        if self.config.deadline_seconds is not None and self._deadline is None:
            self._deadline = time.monotonic() + self.config.deadline_seconds

        with self._stage(PipelineState.IDLE, PipelineState.INGESTED):
            if not isinstance(sites, SiteCollection):
                sites = SiteCollection(sites)

            self.boundary = load_boundary(boundary)
            if self.boundary.feature_count > 1:
                self._warn('Clipping polygon collection contains more than one feature.',
                           features=self.boundary.feature_count)

            records = _materialize(sites.records)
            self.input_count = len(records) if records is not None else 0
            within = self.boundary.rings if self.config.contained_sites_only else None
            min_sites = 1 if self.config.allow_single_site else 2
            self.sites = ingest_sites(records, min_sites=min_sites, within=within)

            if self.config.spatial_reference is not None:
                self.spatial_reference = self.config.spatial_reference
            else:
                self.spatial_reference = sites.spatial_reference
            self.attribute_name = sites.attribute_name

            logger.info('Input Node Count', count=self.input_count)

    def build_triangulation(self):
        with self._stage(PipelineState.INGESTED, PipelineState.TRIANGULATED):
            logger.info('Generating TIN...')
            self.mesh = build_triangulation(
                [s.xy for s in self.sites], random_seed=self.config.random_seed)
            logger.info('TIN Node Count', count=len(self.mesh.points))

    def derive_cells(self):
        with self._stage(PipelineState.TRIANGULATED, PipelineState.CELLS_BUILT):
            self.cells = derive_cells(
                self.mesh, self.boundary.bbox, self.config.extension_factor)

    def _clip_site(self, cell):
        if self.cancel_event.is_set():
            return None
        try:
            return clip_ring(cell.ring, self.boundary.rings, site_id=cell.site_id)
        except ClippingFailure as e:
            return e

    def clip(self):
        """Clip every cell; runs on a thread pool when max_workers > 1."""
        with self._stage(PipelineState.CELLS_BUILT, PipelineState.CLIPPED):
            logger.info('Generating polygons...', cells=len(self.cells))
            workers = self.config.max_workers
            if workers > 1:
                with ThreadPoolExecutor(max_workers=workers) as pool:
                    results = list(pool.map(self._clip_site, self.cells))
            else:
                results = []
                for cell in self.cells:
                    if self.cancel_event.is_set():
                        break
                    results.append(self._clip_site(cell))

            if self.cancel_event.is_set():
                raise PipelineCancelled('cancelled while clipping cells')

            clipped = []
            for cell, result in zip(self.cells, results):
                if isinstance(result, ClippingFailure):
                    self._warn(str(result), site_id=cell.site_id)
                    clipped.append([])
                else:
                    clipped.append(result)
            self.clipped = clipped

            empty = sum(1 for rings in clipped if not rings)
            if empty:
                logger.info('Sites without output', count=empty)

    def emit(self):
        """Bind attributes and stream records to the sink in site order."""
        with self._stage(PipelineState.CLIPPED, PipelineState.EMITTED):
            self.polygons = bind_attributes(self.sites, self.clipped)
            self.sink.open(self.spatial_reference, self.attribute_name)
            try:
                for polygon in self.polygons:
                    try:
                        self.sink.write(polygon)
                    except Exception as e:
                        raise OutputWriteError(polygon.site_id, e) from e
            finally:
                self.sink.close()
            logger.info('Polygons written', count=len(self.polygons))
        self.state = PipelineState.DONE

    def run(self, sites, boundary):
        """Run every stage in order and return the result."""
        self.ingest(sites, boundary)
        self.build_triangulation()
        self.derive_cells()
        self.clip()
        self.emit()
        return ThiessenResult(
            polygons=self.polygons,
            spatial_reference=self.spatial_reference,
            warnings=list(self.warnings),
            input_count=self.input_count,
            site_count=len(self.sites),
        )


def generate_thiessen_polygons(sites, boundary, config=None, sink=None, cancel_event=None):
    """Build clipped Thiessen polygons for labeled sites.

    Args:
        sites: SiteCollection, or an iterable of (x, y, attribute) records.
        boundary: A ring, or a collection of features (each a ring or a
            list of rings). Only the first feature is used.
        config: ThiessenConfig; defaults when None.
        sink: PolygonSink; an in-memory ListSink when None.
        cancel_event: threading.Event checked between per-site clips.

    Returns:
        ThiessenResult.
    """
    pipeline = ThiessenPipeline(config=config, sink=sink, cancel_event=cancel_event)
    return pipeline.run(sites, boundary)
