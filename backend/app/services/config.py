"""
Configuration values shared by the mesh bridge services.

Settings are plain module constants.  Two environment variables are
honoured:

- ``MESH_BRIDGE_SPEED`` – encoder speed setting (0 = best compression,
  10 = fastest).  Read once at import time; defaults to 0.
- ``MESH_BRIDGE_DEBUG`` – when set to any non-empty value, the builder,
  extractor and codec emit extra debug messages (counts before and after
  deduplication, buffer sizes).  Checked on every call.
"""

from __future__ import annotations

import os

# Speed settings follow Draco's 0..10 scale where 0 means "maximum
# compression, no speed preference".  The codec passes ``10 - speed`` as
# the Draco compression level.
MIN_SPEED: int = 0
MAX_SPEED: int = 10
DEFAULT_SPEED: int = int(os.getenv("MESH_BRIDGE_SPEED", "0"))

# Draco quantization for positions and normals.
QUANTIZATION_BITS: int = 14

# Keep point and face order through Draco so that point ids and winding
# survive encoding.
PRESERVE_ORDER: bool = True

# Only three-component float attributes are handled.
NUM_COMPONENTS: int = 3

# Normals are used while building (points with different normals stay
# distinct) but are not transmitted by the encode entry point, so the
# decode entry point returns an empty normal array for buffers it
# produced.
ENCODE_NORMALS: bool = False


def debug_enabled() -> bool:
    """Return True when verbose diagnostics were requested."""
    return bool(os.getenv("MESH_BRIDGE_DEBUG"))
