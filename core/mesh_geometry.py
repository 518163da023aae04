#!/usr/bin/env python3
"""
Mesh Geometry Module
Rigid rotation of mesh buffers and recomputation of derived data.
"""

from typing import Dict, Optional, Tuple

import numpy as np

from .import_log import ImportLog
from .rotations import rotate_vectors
from .scene_data import MeshBuffer


def normalize_rows(vectors: np.ndarray) -> np.ndarray:
    """Normalize each row; zero-length rows stay zero"""
    lengths = np.linalg.norm(vectors, axis=1, keepdims=True)
    safe = np.where(lengths > 1e-12, lengths, 1.0)
    return np.where(lengths > 1e-12, vectors / safe, 0.0)


def _any_perpendicular(normals: np.ndarray) -> np.ndarray:
    axis = np.zeros_like(normals)
    # Cross with whichever world axis is least aligned with the normal
    axis[np.arange(len(normals)), np.argmin(np.abs(normals), axis=1)] = 1.0
    return normalize_rows(np.cross(normals, axis))


def calculate_tangents(mesh: MeshBuffer) -> np.ndarray:
    """Compute per-vertex tangents from triangles, normals and the first UV set

    Each triangle contributes its UV-space tangent and bitangent directions to its
    three vertices. Accumulated tangents are orthonormalized against the vertex
    normal; w holds the handedness of the tangent frame (+1 or -1).

    Args:
        mesh: Mesh buffer with vertices, normals and triangles

    Returns:
        np.ndarray: (N, 4) tangents
    """
    vertex_count = len(mesh.vertices)
    tan1 = np.zeros((vertex_count, 3))
    tan2 = np.zeros((vertex_count, 3))

    tris = mesh.triangles.reshape(-1, 3)
    if len(tris):
        i1, i2, i3 = tris[:, 0], tris[:, 1], tris[:, 2]
        v1, v2, v3 = mesh.vertices[i1], mesh.vertices[i2], mesh.vertices[i3]

        if len(mesh.uv) == vertex_count:
            w1, w2, w3 = mesh.uv[i1], mesh.uv[i2], mesh.uv[i3]
        else:
            w1 = w2 = w3 = np.zeros((len(tris), 2))

        e1 = v2 - v1
        e2 = v3 - v1
        s1 = (w2 - w1)[:, 0:1]
        s2 = (w3 - w1)[:, 0:1]
        t1 = (w2 - w1)[:, 1:2]
        t2 = (w3 - w1)[:, 1:2]

        det = s1 * t2 - s2 * t1
        # Triangles with degenerate UVs carry no tangent information
        r = np.where(np.abs(det) > 1e-20, 1.0 / np.where(det == 0.0, 1.0, det), 0.0)

        sdir = (t2 * e1 - t1 * e2) * r
        tdir = (s1 * e2 - s2 * e1) * r

        for idx in (i1, i2, i3):
            np.add.at(tan1, idx, sdir)
            np.add.at(tan2, idx, tdir)

    normals = normalize_rows(mesh.normals) if len(mesh.normals) == vertex_count \
        else np.zeros((vertex_count, 3))

    # Gram-Schmidt against the normal
    tangent = tan1 - normals * np.sum(normals * tan1, axis=1, keepdims=True)
    lengths = np.linalg.norm(tangent, axis=1)
    degenerate = lengths <= 1e-12
    tangent = normalize_rows(tangent)
    if np.any(degenerate):
        tangent[degenerate] = _any_perpendicular(normals[degenerate])

    handedness = np.where(np.sum(np.cross(normals, tangent) * tan2, axis=1) < 0.0, -1.0, 1.0)
    return np.column_stack([tangent, handedness])


class MeshGeometryTransformer:
    """Rotates shared mesh buffers, at most once per buffer

    A buffer referenced by several nodes is rotated the first time it is seen.
    Later requests with the same rotation are no-ops; requests with a different
    rotation are refused and reported, since the buffer can only hold one.
    """

    def __init__(self, log: Optional[ImportLog] = None):
        self.log = log
        self._rotated: Dict[int, Tuple[MeshBuffer, np.ndarray]] = {}

    def reset(self):
        """Forget rotated buffers (call once per hierarchy walk)"""
        self._rotated = {}

    def was_rotated(self, mesh: MeshBuffer) -> bool:
        return id(mesh) in self._rotated

    def rotate(self, mesh: Optional[MeshBuffer], rotation) -> bool:
        """Rotate a mesh buffer in place

        Args:
            mesh: Buffer to rotate; None is ignored
            rotation: Quaternion [x, y, z, w]

        Returns:
            bool: True if the buffer was modified by this call
        """
        if mesh is None:
            return False

        rotation = np.asarray(rotation, dtype=np.float64)
        previous = self._rotated.get(id(mesh))
        if previous is not None:
            if not np.allclose(previous[1], rotation, atol=1e-9) and self.log:
                self.log.warning(
                    f"mesh [{mesh.name}] is shared by objects needing different rotations; "
                    "kept the first one"
                )
            return False

        rotate_mesh(mesh, rotation)
        # Keep a reference so the id stays unique for the lifetime of the walk
        self._rotated[id(mesh)] = (mesh, rotation)
        return True


def rotate_mesh(mesh: MeshBuffer, rotation):
    """Rotate vertices and normals, then refresh bounds and tangents

    This is destructive: every node sharing the buffer sees the change.

    Args:
        mesh: Buffer to modify
        rotation: Quaternion [x, y, z, w]
    """
    if len(mesh.vertices):
        mesh.vertices = rotate_vectors(rotation, mesh.vertices)
    if len(mesh.normals):
        mesh.normals = normalize_rows(rotate_vectors(rotation, mesh.normals))
    mesh.recalculate_bounds()

    if mesh.has_tangents:
        mesh.tangents = calculate_tangents(mesh)
