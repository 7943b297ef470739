"""
Tests for the mesh encode/decode endpoints.

These tests use FastAPI's TestClient to simulate requests against the
application without running a real server.  They verify that a mesh
posted to the encode endpoint comes back from the decode endpoint
(within Draco's quantization) and that bad input is answered with HTTP 400.
"""

import sys
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient

# Add the backend directory to sys.path so we can import the app
sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.main import app  # type: ignore


SQUARE = {
    "vertices": [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]],
    "faces": [[0, 1, 2], [0, 2, 3]],
}


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_encode_then_decode_square(client: TestClient) -> None:
    """Encoding the unit square and decoding the bytes should give it back."""
    encoded = client.post("/api/meshes/encode", json=SQUARE)
    assert encoded.status_code == 200
    assert encoded.headers["content-type"] == "application/octet-stream"
    assert len(encoded.content) > 0

    decoded = client.post("/api/meshes/decode", content=encoded.content)
    assert decoded.status_code == 200
    mesh = decoded.json()
    assert mesh["pointCount"] == 4
    assert mesh["faceCount"] == 2
    assert mesh["normals"] == []
    # Draco quantizes positions, so compare the triangles within a tolerance.
    vertices = np.asarray(mesh["vertices"])
    faces = np.asarray(mesh["faces"])
    expected = np.asarray(SQUARE["vertices"])[np.asarray(SQUARE["faces"])]
    np.testing.assert_allclose(vertices[faces], expected, atol=1e-3)


def test_encode_without_faces_returns_empty_body(client: TestClient) -> None:
    response = client.post("/api/meshes/encode", json={"vertices": [[0, 0, 0]], "faces": []})
    assert response.status_code == 200
    assert response.content == b""


def test_encode_rejects_out_of_range_face(client: TestClient) -> None:
    body = {"vertices": SQUARE["vertices"][:3], "faces": [[0, 1, 3]]}
    response = client.post("/api/meshes/encode", json=body)
    assert response.status_code == 400
    assert "exceed" in response.json()["detail"]


def test_encode_rejects_mismatched_normals(client: TestClient) -> None:
    body = dict(SQUARE, normals=[[0.0, 0.0, 1.0], [0.0, 0.0, 1.0]])
    response = client.post("/api/meshes/encode", json=body)
    assert response.status_code == 400


def test_decode_empty_body_returns_empty_mesh(client: TestClient) -> None:
    response = client.post("/api/meshes/decode", content=b"")
    assert response.status_code == 200
    mesh = response.json()
    assert mesh["vertices"] == []
    assert mesh["normals"] == []
    assert mesh["faces"] == []
    assert mesh["pointCount"] == 0


def test_decode_rejects_garbage(client: TestClient) -> None:
    response = client.post("/api/meshes/decode", content=b"definitely not a mesh")
    assert response.status_code == 400
