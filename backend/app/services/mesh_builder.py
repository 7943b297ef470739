"""
Build an ``AttributedMesh`` from flat vertex/normal/face arrays and
encode it.

Functions defined here:

- ``build_attributed_mesh(vertices, normals, faces)`` – validate the
  arrays, copy them into position/normal attributes with identity
  mappings, set the faces and deduplicate.
- ``encode_faces_to_bytes(vertices, normals, faces)`` – the encode
  entry point.  Returns ``b""`` for an empty face array without touching
  the codec.

Vertices are expected in X, Y, Z order.  Face winding is preserved
exactly as given.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from . import codec
from .attributed_mesh import AttributedMesh, AttributeType, PointAttribute, dedupe
from .config import DEFAULT_SPEED, ENCODE_NORMALS, NUM_COMPONENTS, debug_enabled
from .errors import AttributeSizeMismatch, IndexOutOfRange

logger = logging.getLogger(__name__)


def _as_rows(arr, dtype) -> np.ndarray:
    """Coerce ``arr`` into a contiguous ``(n, 3)`` array of ``dtype``."""
    if arr is None:
        return np.zeros((0, NUM_COMPONENTS), dtype=dtype)
    rows = np.asarray(arr)
    if rows.size == 0:
        return np.zeros((0, NUM_COMPONENTS), dtype=dtype)
    if rows.ndim == 2 and rows.shape[1] != NUM_COMPONENTS:
        raise ValueError(f"Expected rows of {NUM_COMPONENTS} values, got shape {rows.shape}")
    return np.ascontiguousarray(rows.reshape(-1, NUM_COMPONENTS))


def _as_face_rows(faces) -> np.ndarray:
    rows = _as_rows(faces, np.uint32)
    if rows.dtype.kind not in "iu":
        raise ValueError(f"Face indices must be integers, got {rows.dtype}")
    return rows


def build_attributed_mesh(vertices, normals, faces) -> AttributedMesh:
    """Construct a deduplicated ``AttributedMesh`` from flat arrays.

    Args:
        vertices: Array-like of shape (N, 3), X/Y/Z positions.
        normals: Array-like of shape (N, 3), or empty/``None`` for none.
        faces: Array-like of shape (F, 3) of point indices.

    Returns:
        AttributedMesh: The mesh with a position attribute, an optional
        normal attribute and the given faces.

    Raises:
        IndexOutOfRange: If any face index is negative or >= N.
        AttributeSizeMismatch: If normals are given but M != N.
        ValueError: If an array cannot be viewed as rows of three.
    """
    vertex_rows = _as_rows(vertices, np.float32).astype(np.float32, copy=False)
    normal_rows = _as_rows(normals, np.float32).astype(np.float32, copy=False)
    face_rows = _as_face_rows(faces)

    vertex_count = vertex_rows.shape[0]
    normal_count = normal_rows.shape[0]
    face_count = face_rows.shape[0]

    if face_count > 0:
        max_vertex = int(face_rows.max())
        if vertex_count < max_vertex + 1:
            raise IndexOutOfRange(max_vertex, vertex_count)
        if int(face_rows.min()) < 0:
            raise IndexOutOfRange(int(face_rows.min()), vertex_count)

    if normal_count > 0 and normal_count != vertex_count:
        raise AttributeSizeMismatch(normal_count, vertex_count)

    mesh = AttributedMesh(num_points=vertex_count)
    # Copies are taken so the caller's arrays are never aliased.
    mesh.add_attribute(PointAttribute(AttributeType.POSITION, vertex_rows.copy()))
    if normal_count > 0:
        mesh.add_attribute(PointAttribute(AttributeType.NORMAL, normal_rows.copy()))
    mesh.set_faces(face_rows.astype(np.uint32))

    dedupe(mesh)
    if debug_enabled():
        logger.debug(
            "Built mesh from %d vertices/%d normals/%d faces: %d points after dedupe",
            vertex_count,
            normal_count,
            face_count,
            mesh.num_points,
        )
    return mesh


def encode_faces_to_bytes(vertices, normals, faces, speed: Optional[int] = None) -> bytes:
    """Encode flat mesh arrays into a compressed byte buffer.

    Special case: if ``faces`` is empty an empty buffer is returned and
    neither the mesh builder nor the codec runs.

    Args:
        vertices: Array-like of shape (N, 3).
        normals: Array-like of shape (N, 3), or empty/``None``.
        faces: Array-like of shape (F, 3).
        speed: Codec speed setting; defaults to ``config.DEFAULT_SPEED``
            (maximum compression).

    Returns:
        bytes: The encoded mesh.
    """
    face_rows = _as_face_rows(faces)
    if face_rows.shape[0] == 0:
        return b""
    mesh = build_attributed_mesh(vertices, normals, face_rows)
    encoded = codec.encode_mesh(
        mesh,
        DEFAULT_SPEED if speed is None else speed,
        include_normals=ENCODE_NORMALS,
    )
    logger.info(
        "Encoded mesh with %d points and %d faces into %d bytes",
        mesh.num_points,
        mesh.num_faces,
        len(encoded),
    )
    return encoded
