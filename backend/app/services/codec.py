"""
Draco codec adapter for ``AttributedMesh`` objects.

Compression itself is done by Draco through the ``DracoPy`` bindings.
This module only moves data between an ``AttributedMesh`` and the flat
per-point arrays DracoPy works with:

- ``encode_mesh(mesh, speed, include_normals)`` – resolve every point
  through the attribute mappings and hand positions, faces and
  (optionally) normals to ``DracoPy.encode``.
- ``encode_point_cloud(mesh, speed, include_normals)`` – same, without
  faces, so Draco writes point-cloud geometry.
- ``decode_buffer(buffer)`` – run ``DracoPy.decode`` and wrap the result
  in an identity-mapped ``AttributedMesh`` together with its
  ``GeometryType``.

Speed settings use Draco's 0..10 scale where 0 means "maximum
compression, no speed preference"; they map to Draco compression
levels as ``10 - speed``.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import DracoPy
import numpy as np

from .attributed_mesh import AttributedMesh, AttributeType, GeometryType, PointAttribute
from .config import (
    DEFAULT_SPEED,
    MAX_SPEED,
    MIN_SPEED,
    NUM_COMPONENTS,
    PRESERVE_ORDER,
    QUANTIZATION_BITS,
    debug_enabled,
)
from .errors import MalformedBuffer, MissingAttribute

logger = logging.getLogger(__name__)


def _compression_level(speed: int) -> int:
    speed = int(speed)
    if not MIN_SPEED <= speed <= MAX_SPEED:
        raise ValueError(f"Speed must be between {MIN_SPEED} and {MAX_SPEED}, got {speed}")
    return MAX_SPEED - speed


def _per_point_arrays(
    mesh: AttributedMesh, include_normals: bool
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    position = mesh.get_named_attribute(AttributeType.POSITION)
    if position is None:
        raise MissingAttribute("Cannot encode a mesh without a position attribute")
    points = position.resolve_points(mesh.num_points)
    normals = None
    normal_att = mesh.get_named_attribute(AttributeType.NORMAL)
    if include_normals and normal_att is not None:
        normals = normal_att.resolve_points(mesh.num_points)
    return points, normals


def _encode(
    mesh: AttributedMesh,
    geometry: GeometryType,
    speed: int,
    include_normals: bool,
) -> bytes:
    level = _compression_level(speed)
    points, normals = _per_point_arrays(mesh, include_normals)
    faces = None
    if geometry == GeometryType.TRIANGULAR_MESH:
        faces = np.ascontiguousarray(mesh.faces, dtype=np.uint32)
    encoded = DracoPy.encode(
        points,
        faces=faces,
        quantization_bits=QUANTIZATION_BITS,
        compression_level=level,
        preserve_order=PRESERVE_ORDER,
        normals=normals,
    )
    if debug_enabled():
        logger.debug(
            "Encoded %s: %d points, %d faces, normals=%s, level %d -> %d bytes",
            geometry.name,
            mesh.num_points,
            0 if faces is None else faces.shape[0],
            normals is not None,
            level,
            len(encoded),
        )
    return encoded


def encode_mesh(
    mesh: AttributedMesh,
    speed: int = DEFAULT_SPEED,
    include_normals: bool = True,
) -> bytes:
    """Encode a triangular mesh into a Draco buffer.

    Args:
        mesh: Mesh to encode.  It is not modified.
        speed: Encoder speed setting; 0 selects maximum compression.
        include_normals: Whether to write the normal attribute (when the
            mesh has one).  Points are written unchanged, so points that
            only differed in their normal come back as duplicates.

    Returns:
        The encoded bytes.

    Raises:
        MissingAttribute: If the mesh has no position attribute.
    """
    return _encode(mesh, GeometryType.TRIANGULAR_MESH, speed, include_normals)


def encode_point_cloud(
    mesh: AttributedMesh,
    speed: int = DEFAULT_SPEED,
    include_normals: bool = True,
) -> bytes:
    """Encode only the points and attributes of ``mesh`` (faces are dropped)."""
    return _encode(mesh, GeometryType.POINT_CLOUD, speed, include_normals)


def _rows(arr) -> np.ndarray:
    if arr is None:
        return np.zeros((0, NUM_COMPONENTS), dtype=np.float32)
    return np.asarray(arr, dtype=np.float32).reshape(-1, NUM_COMPONENTS)


def decode_buffer(buffer: bytes) -> Tuple[GeometryType, AttributedMesh]:
    """Decode a Draco buffer.

    Args:
        buffer: Draco-encoded bytes, from ``encode_mesh`` or any other
            Draco encoder.

    Returns:
        The geometry type and a freshly allocated ``AttributedMesh``
        whose attributes use identity mappings.

    Raises:
        MalformedBuffer: If Draco cannot decode the buffer.
    """
    try:
        decoded = DracoPy.decode(bytes(buffer))
    except (DracoPy.FileTypeException, ValueError) as exc:
        raise MalformedBuffer(f"Buffer could not be decoded: {exc}") from exc

    if isinstance(decoded, DracoPy.DracoMesh):
        geometry = GeometryType.TRIANGULAR_MESH
    else:
        geometry = GeometryType.POINT_CLOUD

    points = _rows(decoded.points)
    mesh = AttributedMesh(num_points=points.shape[0])
    mesh.add_attribute(PointAttribute(AttributeType.POSITION, points))

    normals = _rows(getattr(decoded, "normals", None))
    if normals.shape[0] > 0:
        if normals.shape[0] != points.shape[0]:
            raise MalformedBuffer(
                f"Decoded {normals.shape[0]} normals for {points.shape[0]} points"
            )
        mesh.add_attribute(PointAttribute(AttributeType.NORMAL, normals))

    if geometry == GeometryType.TRIANGULAR_MESH:
        faces = np.asarray(decoded.faces, dtype=np.uint32).reshape(-1, 3)
        if faces.size and int(faces.max()) >= mesh.num_points:
            raise MalformedBuffer("Decoded faces reference points beyond the point count")
        mesh.set_faces(faces)

    if debug_enabled():
        logger.debug(
            "Decoded %s: %d points, %d faces, %d attributes",
            geometry.name,
            mesh.num_points,
            mesh.num_faces,
            mesh.num_attributes,
        )
    return geometry, mesh
