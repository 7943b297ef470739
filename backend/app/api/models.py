"""
Pydantic data models for the mesh bridge API.

These models define the JSON shapes accepted by the encode endpoint and
returned by the decode endpoint.  Arrays travel as lists of three-value
rows so that clients do not need to agree on a flat layout.
"""

from __future__ import annotations

from typing import List, Tuple

from pydantic import BaseModel, Field

Vec3 = Tuple[float, float, float]
Tri = Tuple[int, int, int]


class MeshEncodeRequest(BaseModel):
    """Flat mesh arrays to be encoded."""

    vertices: List[Vec3] = Field(..., description="Vertex positions as (x, y, z) rows")
    normals: List[Vec3] = Field(
        default_factory=list,
        description="Per-vertex normals; empty or one row per vertex",
    )
    faces: List[Tri] = Field(..., description="Triangles as rows of three point indices")


class MeshDecodeResponse(BaseModel):
    """Flat mesh arrays recovered from an encoded buffer."""

    vertices: List[Vec3] = Field(..., description="Vertex positions as (x, y, z) rows")
    normals: List[Vec3] = Field(..., description="Per-vertex normals (empty when absent)")
    faces: List[Tri] = Field(..., description="Triangles as rows of three point indices")
    pointCount: int = Field(..., description="Number of points after deduplication")
    faceCount: int = Field(..., description="Number of decoded triangles")
