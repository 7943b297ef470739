"""
Routes for encoding flat mesh arrays and decoding compressed buffers.

``POST /meshes/encode`` accepts a JSON body with vertices, optional
normals and faces and responds with the encoded bytes
(``application/octet-stream``).  ``POST /meshes/decode`` accepts the raw
bytes as the request body and responds with the recovered arrays as
JSON.  Mesh bridge errors are reported as HTTP 400 with the error
message as detail.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response

from .models import MeshDecodeResponse, MeshEncodeRequest
from ..services.errors import MeshBridgeError
from ..services.mesh_builder import encode_faces_to_bytes
from ..services.mesh_extractor import decode_bytes_to_faces

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/meshes/encode", response_class=Response)
async def encode_mesh(payload: MeshEncodeRequest) -> Response:
    """Encode the posted arrays and return the compressed buffer.

    An empty face list yields an empty response body.
    """
    try:
        encoded = encode_faces_to_bytes(payload.vertices, payload.normals, payload.faces)
    except MeshBridgeError as exc:
        logger.info("Rejected encode request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    return Response(content=encoded, media_type="application/octet-stream")


@router.post("/meshes/decode", response_model=MeshDecodeResponse)
async def decode_mesh(request: Request) -> MeshDecodeResponse:
    """Decode the raw request body into flat mesh arrays."""
    body = await request.body()
    try:
        vertices, normals, faces = decode_bytes_to_faces(body)
    except MeshBridgeError as exc:
        logger.info("Rejected decode request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    return MeshDecodeResponse(
        vertices=vertices.tolist(),
        normals=normals.tolist(),
        faces=faces.tolist(),
        pointCount=int(vertices.shape[0]),
        faceCount=int(faces.shape[0]),
    )
