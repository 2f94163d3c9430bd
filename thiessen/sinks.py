"""
Output sinks.

A sink receives finished polygons from a single writer, in site-id
order. Implementations are not expected to be thread safe.
"""


class PolygonSink:
    """Base class for output destinations; subclasses implement write().

    open() and close() default to no-ops.
    """

    def open(self, spatial_reference, attribute_name):
        """Called once before the first record."""

    def write(self, polygon):
        raise NotImplementedError

    def close(self):
        """Called once after the last record, also after a failed write."""


class ListSink(PolygonSink):
    """Collects records in memory."""

    def __init__(self):
        self.records = []
        self.spatial_reference = None
        self.attribute_name = None
        self.closed = False

    def open(self, spatial_reference, attribute_name):
        self.spatial_reference = spatial_reference
        self.attribute_name = attribute_name

    def write(self, polygon):
        self.records.append(polygon)

    def close(self):
        self.closed = True
