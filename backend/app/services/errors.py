"""
Exception types raised by the mesh bridge services.

Every failure aborts the current encode or decode call and surfaces as
one of the classes below.  They all derive from ``MeshBridgeError`` so
that the HTTP layer can translate them in a single ``except`` clause.
``MeshBridgeError`` itself subclasses ``ValueError`` because every
condition here is caused by bad input data (either the caller's arrays
or a byte buffer that does not honour the codec contract).
"""

from __future__ import annotations

from typing import Optional


class MeshBridgeError(ValueError):
    """Base class for all mesh bridge failures."""


class IndexOutOfRange(MeshBridgeError):
    """A face references a point index outside ``[0, vertex_count)``."""

    def __init__(self, max_index: int, vertex_count: int) -> None:
        self.max_index = max_index
        self.vertex_count = vertex_count
        super().__init__(
            f"Face indexes exceed vertices length (max index {max_index}, "
            f"{vertex_count} vertices)"
        )


class AttributeSizeMismatch(MeshBridgeError):
    """The normals array is non-empty but does not match the vertex count."""

    def __init__(self, normal_count: int, vertex_count: int) -> None:
        self.normal_count = normal_count
        self.vertex_count = vertex_count
        super().__init__(
            f"normals array size ({normal_count}) does not correspond to "
            f"vertices array size ({vertex_count})"
        )


class UnsupportedGeometry(MeshBridgeError):
    """The decoded payload is not a triangular mesh."""


class MissingAttribute(MeshBridgeError):
    """The decoded mesh carries no position attribute."""


class ValueReadError(MeshBridgeError):
    """A point's attribute value could not be read from its value table."""

    def __init__(self, point_index: int, attribute: Optional[str] = None) -> None:
        self.point_index = point_index
        self.attribute = attribute
        what = attribute.lower() if attribute else "value"
        super().__init__(f"Error reading {what} for point {point_index}")


class MalformedBuffer(MeshBridgeError):
    """The byte buffer is not a decodable Draco buffer."""
