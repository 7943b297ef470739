"""
Attribute-indexed triangle mesh used as the codec's interchange format.

An ``AttributedMesh`` stores a number of *points* (logical vertex
slots), a face table referencing point indices and one
``PointAttribute`` per named property (position, normal).  Each
attribute owns a value table of unique rows and maps every point to a
row of that table.  The mapping is either the identity (point ``i``
reads row ``i``) or an explicit ``uint32`` index array with one entry
per point.  Several points may share a row once values have been
deduplicated, so the value table can be smaller than the point count.

The module also provides the two deduplication passes run before
encoding and after decoding:

- ``deduplicate_attribute_values`` merges bit-identical value rows and
  rewrites the point→value mappings.
- ``deduplicate_point_ids`` merges points whose mapped value index is
  the same in every attribute and remaps the faces to the surviving
  point ids.

``dedupe`` runs both passes in that order.  Both passes keep the first
occurrence of each duplicate, so running them again on their output is
a no-op.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .config import NUM_COMPONENTS, debug_enabled
from .errors import ValueReadError

logger = logging.getLogger(__name__)


class AttributeType(enum.IntEnum):
    """Named per-point properties supported by the bridge."""

    POSITION = 0
    NORMAL = 1


class GeometryType(enum.IntEnum):
    """Kind of geometry stored in an encoded buffer."""

    POINT_CLOUD = 0
    TRIANGULAR_MESH = 1


@dataclass
class PointAttribute:
    """A per-point property with its own value table.

    Attributes:
        attribute_type: Which property the attribute holds.
        values: Value table of shape (K, 3), float32.
        mapping: Explicit point→value index array of shape (P,), or
            ``None`` for the identity mapping.
    """

    attribute_type: AttributeType
    values: np.ndarray = field(
        default_factory=lambda: np.zeros((0, NUM_COMPONENTS), dtype=np.float32)
    )
    mapping: Optional[np.ndarray] = None

    @property
    def num_components(self) -> int:
        return int(self.values.shape[1])

    @property
    def size(self) -> int:
        """Number of rows in the value table (not the number of points)."""
        return int(self.values.shape[0])

    @property
    def is_identity_mapping(self) -> bool:
        return self.mapping is None

    def set_explicit_mapping(self, mapping: np.ndarray) -> None:
        self.mapping = np.asarray(mapping, dtype=np.uint32).reshape(-1)

    def mapped_index(self, point_index: int) -> int:
        """Return the value-table row read by ``point_index``."""
        if self.mapping is None:
            return int(point_index)
        return int(self.mapping[point_index])

    def mapped_indices(self, num_points: int) -> np.ndarray:
        """Return the value-table rows for points ``0 .. num_points - 1``.

        With an explicit mapping shorter than ``num_points`` the missing
        entries are reported as ``size`` (one past the end of the table)
        so that callers treat them as unreadable rather than silently
        reading row 0.
        """
        if self.mapping is None:
            return np.arange(num_points, dtype=np.int64)
        mapped = np.full(num_points, self.size, dtype=np.int64)
        count = min(num_points, self.mapping.shape[0])
        mapped[:count] = self.mapping[:count]
        return mapped

    def _readable_rows(self, points: np.ndarray) -> np.ndarray:
        """Map ``points`` to value-table rows, failing on the first bad one."""
        mapped = np.full(points.shape, self.size, dtype=np.int64)
        if self.mapping is None:
            inside = points >= 0
            mapped[inside] = points[inside]
        else:
            inside = (points >= 0) & (points < self.mapping.shape[0])
            mapped[inside] = self.mapping[points[inside]]
        unreadable = np.flatnonzero(mapped >= self.size)
        if unreadable.size:
            raise ValueReadError(int(points[unreadable[0]]), self.attribute_type.name)
        return mapped

    def resolve_points(self, num_points: int) -> np.ndarray:
        """Return a ``(num_points, 3)`` float32 array of per-point values.

        Raises:
            ValueReadError: Naming the first point whose mapped row is not
                present in the value table.
        """
        rows = self._readable_rows(np.arange(num_points, dtype=np.int64))
        return np.ascontiguousarray(self.values[rows], dtype=np.float32)

    def resolve(self, point_index: int) -> np.ndarray:
        """Return the value held by ``point_index``.

        Raises:
            ValueReadError: If the point has no mapping entry or its
                mapped row lies outside the value table.
        """
        row = self._readable_rows(np.array([point_index], dtype=np.int64))[0]
        return self.values[row].copy()


@dataclass
class AttributedMesh:
    """Triangle mesh whose per-point data lives in ``PointAttribute`` tables."""

    num_points: int = 0
    attributes: List[PointAttribute] = field(default_factory=list)
    faces: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 3), dtype=np.uint32)
    )

    @property
    def num_faces(self) -> int:
        return int(self.faces.shape[0])

    @property
    def num_attributes(self) -> int:
        return len(self.attributes)

    def add_attribute(self, attribute: PointAttribute) -> int:
        """Append ``attribute`` and return its attribute id.

        Raises:
            ValueError: If an attribute of the same type already exists.
        """
        if self.get_named_attribute(attribute.attribute_type) is not None:
            raise ValueError(
                f"Mesh already has a {attribute.attribute_type.name} attribute"
            )
        self.attributes.append(attribute)
        return len(self.attributes) - 1

    def get_named_attribute(self, attribute_type: AttributeType) -> Optional[PointAttribute]:
        for attribute in self.attributes:
            if attribute.attribute_type == attribute_type:
                return attribute
        return None

    def set_faces(self, faces: np.ndarray) -> None:
        self.faces = np.asarray(faces, dtype=np.uint32).reshape(-1, 3)


def _row_keys(rows: np.ndarray) -> np.ndarray:
    """View each row of a 2D array as one opaque byte string.

    Comparing the void view compares raw bytes, so two float rows are
    equal only when they are bit-identical (``-0.0`` and ``0.0`` differ,
    NaNs with the same payload match).
    """
    rows = np.ascontiguousarray(rows)
    width = rows.dtype.itemsize * rows.shape[1]
    return rows.view(np.dtype((np.void, width))).reshape(-1)


def _first_occurrence_unique(rows: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Group identical rows, numbering groups by first occurrence.

    Returns:
        A tuple ``(keep, remap)`` where ``keep`` lists the index of the
        first row of every group in ascending order and ``remap[i]``
        gives the group number of row ``i``.
    """
    if rows.shape[0] == 0:
        return np.zeros(0, dtype=np.int64), np.zeros(0, dtype=np.int64)
    _, first, inverse = np.unique(_row_keys(rows), return_index=True, return_inverse=True)
    inverse = inverse.reshape(-1)
    order = np.argsort(first, kind="stable")
    rank = np.empty_like(order)
    rank[order] = np.arange(order.shape[0])
    return first[order], rank[inverse]


def deduplicate_attribute_values(mesh: AttributedMesh) -> int:
    """Merge bit-identical rows in every attribute's value table.

    Point→value mappings are rewritten so that every point still reads
    the same value.  An attribute whose table has no duplicates keeps
    its current mapping untouched.

    Returns:
        The total number of value rows removed.
    """
    removed = 0
    for attribute in mesh.attributes:
        if attribute.size == 0:
            continue
        keep, remap = _first_occurrence_unique(attribute.values)
        if keep.shape[0] == attribute.size:
            continue
        mapped = attribute.mapped_indices(mesh.num_points)
        if mapped.size and int(mapped.max()) >= attribute.size:
            # Leave broken mappings alone; extraction reports the bad point.
            logger.warning(
                "Skipping value deduplication of %s: mapping exceeds value table",
                attribute.attribute_type.name,
            )
            continue
        removed += attribute.size - keep.shape[0]
        attribute.values = attribute.values[keep]
        attribute.set_explicit_mapping(remap[mapped])
    if removed and debug_enabled():
        logger.debug("Merged %d duplicate attribute values", removed)
    return removed


def deduplicate_point_ids(mesh: AttributedMesh) -> int:
    """Merge points that map to the same value in every attribute.

    Faces are rewritten to reference the surviving (first-seen) point
    ids and attribute mappings are compacted to the surviving points.

    Returns:
        The number of points removed.
    """
    if not mesh.attributes or mesh.num_points == 0:
        return 0
    columns = [attribute.mapped_indices(mesh.num_points) for attribute in mesh.attributes]
    signature = np.stack(columns, axis=1)
    keep, remap = _first_occurrence_unique(signature)
    removed = mesh.num_points - keep.shape[0]
    if removed == 0:
        return 0
    for attribute, column in zip(mesh.attributes, columns):
        attribute.set_explicit_mapping(column[keep])
    if mesh.num_faces:
        mesh.faces = remap[mesh.faces.astype(np.int64)].astype(np.uint32)
    mesh.num_points = int(keep.shape[0])
    if debug_enabled():
        logger.debug("Merged %d duplicate point ids, %d remain", removed, mesh.num_points)
    return removed


def dedupe(mesh: AttributedMesh) -> AttributedMesh:
    """Run value deduplication then point deduplication on ``mesh``."""
    deduplicate_attribute_values(mesh)
    deduplicate_point_ids(mesh)
    return mesh
