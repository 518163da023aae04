#!/usr/bin/env python3
"""
Mesh Hash Module
Structural 32-bit fingerprint of a mesh buffer.

The fingerprint folds every stream of the mesh (vertices, triangles per
submesh, normals, tangents, both UV sets) into a wrapping 32-bit sum, each
stream weighted by its own running multiplier. It is NOT collision resistant:
two different meshes may share a fingerprint, and instance optimization trusts
it without comparing the buffers. This trade-off is deliberate.
"""

import numpy as np

from .scene_data import MeshBuffer

MASK_32 = 0xFFFFFFFF

AXIS_WEIGHTS = np.array([2039.0, 2053.0, 2063.0])
BOUNDS_MAX_WEIGHTS = np.array([1.0, 3.0, 5.0])
BOUNDS_MIN_WEIGHTS = np.array([3.0, 5.0, 1.0])

# First multiplier of each stream
INDEX_SEED = 7
NORMAL_SEED = 11
TANGENT_SEED = 13
UV_SEED = 17
UV2_SEED = 19


def _truncate(values) -> np.ndarray:
    """Float to integer conversion, truncating toward zero"""
    return np.trunc(np.asarray(values, dtype=np.float64)).astype(np.int64)


def _weighted_sum(terms: np.ndarray, seed: int) -> int:
    """sum(terms[i] * (seed + i)) in exact integer arithmetic"""
    if len(terms) == 0:
        return 0
    multipliers = np.arange(seed, seed + len(terms), dtype=np.int64)
    return int(np.sum(terms * multipliers, dtype=np.int64))


def _unit_vector_terms(vectors: np.ndarray) -> np.ndarray:
    # Map [-1, 1] components into [0, 1] before weighting
    mapped = (vectors[:, :3] + 1.0) * 0.5
    return _truncate(mapped @ AXIS_WEIGHTS)


def _uv_terms(uv: np.ndarray) -> np.ndarray:
    return _truncate(uv @ AXIS_WEIGHTS[:2])


def vertex_shape_term(mesh: MeshBuffer) -> int:
    """Vertex contribution, normalized into the bounding box

    Depends only on the shape: a translated copy of a mesh yields the same term.
    """
    bounds = mesh.bounds
    extent = bounds.extent
    inv_extent = np.divide(1.0, extent, out=np.zeros(3), where=extent != 0.0)
    normalized = (mesh.vertices - bounds.min) * inv_extent
    return _weighted_sum(_truncate(normalized @ AXIS_WEIGHTS), 0)


def calculate_mesh_hash(mesh: MeshBuffer) -> int:
    """Compute the fingerprint of a mesh buffer

    Args:
        mesh: Mesh buffer (bounds must reflect the current vertices)

    Returns:
        int: Unsigned 32-bit fingerprint
    """
    bounds = mesh.bounds
    total = vertex_shape_term(mesh)

    # Absolute placement: equal shapes at different origins must differ
    count = len(mesh.vertices)
    bound_term = int(_truncate(bounds.max @ BOUNDS_MAX_WEIGHTS + bounds.min @ BOUNDS_MIN_WEIGHTS))
    total += bound_term * count

    # Triangles, one multiplier per submesh so material splits count
    multiplier = INDEX_SEED
    for submesh in mesh.submeshes:
        total += int(np.sum(submesh, dtype=np.int64)) * multiplier
        multiplier += 1
    total += multiplier * len(mesh.submeshes)

    total += _weighted_sum(_unit_vector_terms(mesh.normals), NORMAL_SEED)
    total += _weighted_sum(_unit_vector_terms(mesh.tangents), TANGENT_SEED)
    total += _weighted_sum(_uv_terms(mesh.uv), UV_SEED)
    total += _weighted_sum(_uv_terms(mesh.uv2), UV2_SEED)

    return total & MASK_32


def format_hash(value: int) -> str:
    return f"{value:08X}"
