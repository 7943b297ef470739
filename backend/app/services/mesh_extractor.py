"""
Decode a compressed buffer and extract flat vertex/normal/face arrays.

The decoded mesh is deduplicated again before extraction because an
encode/decode round trip can reintroduce duplicate point ids.  After
deduplication an attribute's value table may hold fewer rows than
there are points, so every per-point array is produced by walking the
point indices ``0 .. P - 1`` through the attribute's point→value
mapping.  The size of a value table is never used as an output length.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from . import codec
from .attributed_mesh import (
    AttributedMesh,
    AttributeType,
    GeometryType,
    dedupe,
)
from .config import NUM_COMPONENTS, debug_enabled
from .errors import MissingAttribute, UnsupportedGeometry

logger = logging.getLogger(__name__)

MeshArrays = Tuple[np.ndarray, np.ndarray, np.ndarray]


def empty_mesh_arrays() -> MeshArrays:
    """Return ``(0, 3)`` shaped vertex, normal and face arrays."""
    return (
        np.zeros((0, NUM_COMPONENTS), dtype=np.float32),
        np.zeros((0, NUM_COMPONENTS), dtype=np.float32),
        np.zeros((0, 3), dtype=np.uint32),
    )


def extract_flat_arrays(mesh: AttributedMesh) -> MeshArrays:
    """Convert ``mesh`` into flat ``(vertices, normals, faces)`` arrays.

    Returns:
        vertices: float32 array of shape (P, 3).
        normals: float32 array of shape (P, 3), or (0, 3) when the mesh
            has no normal attribute.
        faces: uint32 array of shape (F, 3), in stored order.

    Raises:
        MissingAttribute: If the mesh has no position attribute.
        ValueReadError: If a point's value cannot be read.
    """
    point_count = mesh.num_points

    vertex_att = mesh.get_named_attribute(AttributeType.POSITION)
    if vertex_att is None:
        raise MissingAttribute("Decoded mesh appears to have no vertices.")
    vertices = vertex_att.resolve_points(point_count)

    normal_att = mesh.get_named_attribute(AttributeType.NORMAL)
    if normal_att is None:
        normals = np.zeros((0, NUM_COMPONENTS), dtype=np.float32)
    else:
        # One normal per point, however many distinct normals are stored.
        normals = normal_att.resolve_points(point_count)

    faces = np.array(mesh.faces, dtype=np.uint32).reshape(-1, 3)
    return vertices, normals, faces


def decode_bytes_to_faces(buffer: bytes) -> MeshArrays:
    """Decode a Draco buffer produced by ``encode_faces_to_bytes``.

    Special case: an empty buffer yields three empty arrays and the
    codec is not invoked.

    Raises:
        UnsupportedGeometry: If the buffer holds something other than a
            triangular mesh (for example a point cloud).
        MalformedBuffer: If the codec cannot parse the buffer.
        MissingAttribute: If the mesh has no position attribute.
        ValueReadError: If a point's value cannot be read.
    """
    if len(buffer) == 0:
        return empty_mesh_arrays()

    geometry_type, mesh = codec.decode_buffer(buffer)
    if geometry_type != GeometryType.TRIANGULAR_MESH:
        raise UnsupportedGeometry(
            "Buffer does not appear to be a mesh file. (Is it a pointcloud?)"
        )

    points_before = mesh.num_points
    dedupe(mesh)
    if debug_enabled():
        logger.debug(
            "Deduplicated decoded mesh from %d to %d points", points_before, mesh.num_points
        )

    vertices, normals, faces = extract_flat_arrays(mesh)
    logger.info(
        "Decoded mesh with %d vertices, %d normals and %d faces",
        vertices.shape[0],
        normals.shape[0],
        faces.shape[0],
    )
    return vertices, normals, faces
