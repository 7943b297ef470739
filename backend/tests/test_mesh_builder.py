"""
Tests for building attribute-indexed meshes from flat arrays and for the
encode entry point.
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.services.attributed_mesh import AttributeType  # type: ignore
from app.services.errors import AttributeSizeMismatch, IndexOutOfRange  # type: ignore
from app.services.mesh_builder import (  # type: ignore
    build_attributed_mesh,
    encode_faces_to_bytes,
)


def unit_square() -> tuple[np.ndarray, np.ndarray]:
    """Four corners of the unit square in the z=0 plane and two triangles."""
    vertices = np.array(
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]],
        dtype=np.float32,
    )
    faces = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.uint32)
    return vertices, faces


NO_NORMALS = np.zeros((0, 3), dtype=np.float32)


@pytest.mark.parametrize(
    "vertices, normals",
    [
        (np.zeros((0, 3), dtype=np.float32), NO_NORMALS),
        (np.ones((5, 3), dtype=np.float32), NO_NORMALS),
        # Mismatched normals are not even looked at when there are no faces.
        (np.ones((5, 3), dtype=np.float32), np.ones((2, 3), dtype=np.float32)),
    ],
)
def test_empty_faces_encode_to_empty_buffer(vertices, normals) -> None:
    faces = np.zeros((0, 3), dtype=np.uint32)
    assert encode_faces_to_bytes(vertices, normals, faces) == b""


def test_face_index_equal_to_vertex_count_is_rejected() -> None:
    vertices = np.zeros((3, 3), dtype=np.float32)
    faces = np.array([[0, 1, 3]], dtype=np.uint32)

    with pytest.raises(IndexOutOfRange) as excinfo:
        encode_faces_to_bytes(vertices, NO_NORMALS, faces)
    assert excinfo.value.max_index == 3
    assert excinfo.value.vertex_count == 3


def test_negative_face_index_is_rejected() -> None:
    vertices = np.zeros((3, 3), dtype=np.float32)

    with pytest.raises(IndexOutOfRange):
        build_attributed_mesh(vertices, None, [[0, 1, -1]])


def test_normal_count_mismatch_is_rejected() -> None:
    vertices, faces = unit_square()
    normals = np.zeros((2, 3), dtype=np.float32)

    with pytest.raises(AttributeSizeMismatch) as excinfo:
        encode_faces_to_bytes(vertices, normals, faces)
    assert excinfo.value.normal_count == 2
    assert excinfo.value.vertex_count == 4


def test_face_range_is_checked_before_normal_count() -> None:
    vertices = np.zeros((3, 3), dtype=np.float32)
    normals = np.zeros((2, 3), dtype=np.float32)

    with pytest.raises(IndexOutOfRange):
        build_attributed_mesh(vertices, normals, [[0, 1, 3]])


def test_rows_of_wrong_width_are_rejected() -> None:
    with pytest.raises(ValueError):
        build_attributed_mesh(np.zeros((3, 2), dtype=np.float32), None, [[0, 1, 2]])


def test_build_unit_square_without_normals() -> None:
    vertices, faces = unit_square()

    mesh = build_attributed_mesh(vertices, NO_NORMALS, faces)

    assert mesh.num_points == 4
    assert mesh.num_faces == 2
    assert mesh.get_named_attribute(AttributeType.NORMAL) is None
    position = mesh.get_named_attribute(AttributeType.POSITION)
    assert position.is_identity_mapping
    np.testing.assert_array_equal(position.values, vertices)
    # Winding is preserved exactly.
    np.testing.assert_array_equal(mesh.faces, faces)


def test_shared_normals_are_stored_once() -> None:
    vertices, faces = unit_square()
    normals = np.tile(np.array([0.0, 0.0, 1.0], dtype=np.float32), (4, 1))

    mesh = build_attributed_mesh(vertices, normals, faces)

    normal = mesh.get_named_attribute(AttributeType.NORMAL)
    assert mesh.num_points == 4
    assert normal.size == 1
    for point in range(4):
        np.testing.assert_array_equal(normal.resolve(point), [0.0, 0.0, 1.0])


def test_duplicate_vertices_are_merged_without_touching_input() -> None:
    vertices = np.array(
        [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 0]], dtype=np.float32
    )
    original = vertices.copy()
    faces = np.array([[0, 1, 2], [3, 2, 1]], dtype=np.uint32)

    mesh = build_attributed_mesh(vertices, None, faces)

    assert mesh.num_points == 3
    np.testing.assert_array_equal(mesh.faces, [[0, 1, 2], [0, 2, 1]])
    np.testing.assert_array_equal(vertices, original)


def test_encode_unit_square_produces_draco_bytes() -> None:
    vertices, faces = unit_square()

    encoded = encode_faces_to_bytes(vertices, NO_NORMALS, faces)

    assert len(encoded) > 0
    assert encoded[:5] == b"DRACO"


def test_plain_python_lists_are_accepted() -> None:
    vertices, faces = unit_square()

    encoded = encode_faces_to_bytes(vertices.tolist(), [], faces.tolist())

    assert encoded[:5] == b"DRACO"
