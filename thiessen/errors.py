"""Exception hierarchy for the Thiessen polygon pipeline."""


class ThiessenError(Exception):
    """Base class for every error raised by the pipeline."""


class InputError(ThiessenError):
    """Site or boundary collection is missing or unreadable."""


class InsufficientSitesError(InputError):
    """Too few distinct sites remain after ingestion."""

    def __init__(self, count, minimum):
        super().__init__(
            f'{count} distinct site(s) after ingestion; '
            f'at least {minimum} required')
        self.count = count
        self.minimum = minimum


class DegenerateInputError(InputError):
    """All sites are exactly collinear, so no triangulation exists."""


class ClippingFailure(ThiessenError):
    """Intersecting one cell against the boundary failed numerically.

    Recoverable: the pipeline skips the site and records a warning.
    """

    def __init__(self, site_id, reason):
        super().__init__(f'clipping failed for site {site_id}: {reason}')
        self.site_id = site_id
        self.reason = reason


class OutputWriteError(ThiessenError):
    """The output sink rejected a record."""

    def __init__(self, site_id, reason):
        super().__init__(f'sink rejected site {site_id}: {reason}')
        self.site_id = site_id


class PipelineAborted(ThiessenError):
    """The run was stopped before completion."""


class PipelineCancelled(PipelineAborted):
    """Cancellation was requested while per-site tasks were running."""


class DeadlineExceeded(PipelineAborted):
    """The caller's wall-clock deadline passed between stages."""
