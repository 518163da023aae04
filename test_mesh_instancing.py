#!/usr/bin/env python3
"""
Tests for mesh geometry rotation, fingerprints and instance deduplication.
"""

import numpy as np

from core import rotations
from core.mesh_dedup import MeshDeduplicator
from core.mesh_geometry import MeshGeometryTransformer, calculate_tangents, rotate_mesh
from core.import_log import ImportLog
from core.mesh_hash import calculate_mesh_hash, vertex_shape_term
from core.scene_data import MeshBuffer, SceneNode

QUAD_VERTICES = [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]]


def make_quad(name="quad", offset=(0, 0, 0), tangents=True):
    vertices = np.array(QUAD_VERTICES, dtype=float) + offset
    return MeshBuffer(
        name,
        vertices=vertices,
        normals=[[0, 0, 1]] * 4,
        tangents=[[1, 0, 0, 1]] * 4 if tangents else None,
        uv=[[0, 0], [1, 0], [1, 1], [0, 1]],
        submeshes=[[0, 1, 2, 0, 2, 3]],
    )


def make_triangle(name="tri"):
    return MeshBuffer(
        name,
        vertices=[[0, 0, 0], [2, 0, 0], [0, 3, 1]],
        normals=[[0, 0, 1], [0, 0, 1], [0, 1, 0]],
        uv=[[0, 0], [1, 0], [0, 1]],
        submeshes=[[0, 1, 2]],
    )


# Geometry ------------------------------------------------------------------------

def test_rotate_mesh_updates_bounds_and_normals():
    mesh = make_quad()
    rotate_mesh(mesh, rotations.compound_rotation(False))

    # (x, y, 0) -> (x, 0, -y)
    assert np.allclose(mesh.vertices[2], [1, 0, -1], atol=1e-12)
    assert np.allclose(mesh.bounds.min, [0, 0, -1], atol=1e-12)
    assert np.allclose(mesh.bounds.max, [1, 0, 0], atol=1e-12)
    assert np.allclose(mesh.normals, [[0, 1, 0]] * 4, atol=1e-12)
    assert np.allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)


def test_tangents_recomputed_after_rotation():
    mesh = make_quad()
    rotate_mesh(mesh, rotations.compound_rotation(False))
    assert np.allclose(mesh.tangents, [[1, 0, 0, 1]] * 4, atol=1e-9)


def test_tangents_follow_turn_around():
    mesh = make_quad()
    rotate_mesh(mesh, rotations.compound_rotation(True))
    assert np.allclose(mesh.tangents[:, :3], [[-1, 0, 0]] * 4, atol=1e-9)
    assert np.all(mesh.tangents[:, 3] == 1.0)


def test_tangent_handedness_flips_with_mirrored_uvs():
    mesh = make_quad()
    mesh.uv = np.array([[0, 1], [1, 1], [1, 0], [0, 0]], dtype=float)
    tangents = calculate_tangents(mesh)
    assert np.allclose(tangents[:, :3], [[1, 0, 0]] * 4, atol=1e-9)
    assert np.all(tangents[:, 3] == -1.0)


def test_meshes_without_tangents_stay_without():
    mesh = make_quad(tangents=False)
    rotate_mesh(mesh, rotations.compound_rotation(False))
    assert not mesh.has_tangents


def test_geometry_transformer_rotates_once():
    mesh = make_quad()
    geometry = MeshGeometryTransformer()
    q = rotations.compound_rotation(False)

    assert geometry.rotate(mesh, q) is True
    assert geometry.rotate(mesh, q) is False
    assert geometry.rotate(None, q) is False
    assert np.allclose(mesh.vertices[2], [1, 0, -1], atol=1e-12)

    geometry.reset()
    assert not geometry.was_rotated(mesh)


def test_geometry_transformer_refuses_second_rotation():
    mesh = make_quad()
    log = ImportLog()
    geometry = MeshGeometryTransformer(log)

    assert geometry.rotate(mesh, rotations.compound_rotation(False)) is True
    assert geometry.rotate(mesh, rotations.compound_rotation(True)) is False

    # First rotation kept: (1, 1, 0) -> (1, 0, -1)
    assert np.allclose(mesh.vertices[2], [1, 0, -1], atol=1e-12)
    assert len(log.warnings) == 1
    assert "[quad]" in log.warnings[0]


# Fingerprints --------------------------------------------------------------------

def test_fingerprint_is_stable():
    mesh = make_quad()
    assert calculate_mesh_hash(mesh) == calculate_mesh_hash(mesh)
    assert calculate_mesh_hash(mesh) == calculate_mesh_hash(make_quad())


def test_fingerprint_is_32_bit():
    value = calculate_mesh_hash(make_triangle())
    assert 0 <= value <= 0xFFFFFFFF


def test_fingerprint_changes_with_translation():
    mesh = make_quad()
    moved = make_quad(offset=(5, 0, 0))
    assert calculate_mesh_hash(mesh) != calculate_mesh_hash(moved)


def test_translation_keeps_shape_term():
    mesh = make_quad()
    moved = make_quad(offset=(5, -2, 3))
    assert vertex_shape_term(mesh) == vertex_shape_term(moved)
    assert vertex_shape_term(mesh) != vertex_shape_term(make_triangle())


def test_fingerprint_counts_submesh_split():
    mesh = make_quad()
    split = make_quad()
    split.submeshes = [np.array([0, 1, 2]), np.array([0, 2, 3])]
    assert calculate_mesh_hash(mesh) != calculate_mesh_hash(split)


def test_fingerprint_handles_flat_and_empty_meshes():
    flat = make_quad()
    assert flat.bounds.extent[2] == 0.0
    calculate_mesh_hash(flat)

    empty = MeshBuffer("empty", vertices=[])
    assert calculate_mesh_hash(empty) == 0


# Deduplication -------------------------------------------------------------------

def test_dedup_five_references():
    nodes = [
        SceneNode("n1", mesh=make_quad("a1")),
        SceneNode("n2", mesh=make_triangle("b1")),
        SceneNode("n3", mesh=make_quad("a2")),
        SceneNode("n4", mesh=make_triangle("b2")),
        SceneNode("n5", mesh=make_triangle("b3")),
    ]
    originals = [node.mesh for node in nodes]

    result = MeshDeduplicator().deduplicate(nodes)

    assert result.unique == 2
    assert result.instanced == 3
    assert nodes[0].mesh is nodes[2].mesh is originals[0]
    assert nodes[1].mesh is nodes[3].mesh is nodes[4].mesh is originals[1]
    assert originals[2].released and originals[3].released and originals[4].released
    assert not originals[0].released


def test_dedup_skips_empty_references():
    nodes = [SceneNode("empty"), SceneNode("a", mesh=make_quad()), SceneNode("other")]
    result = MeshDeduplicator().deduplicate(nodes)
    assert result.unique == 1
    assert result.instanced == 0


def test_dedup_already_shared_buffer_untouched():
    shared = make_quad()
    nodes = [SceneNode("a", mesh=shared), SceneNode("b", mesh=shared)]
    result = MeshDeduplicator().deduplicate(nodes)
    assert result.unique == 1
    assert result.instanced == 0
    assert not shared.released


def test_dedup_redirects_nodes_sharing_a_released_buffer():
    first = make_quad("first")
    copy = make_quad("copy")
    nodes = [SceneNode("a", mesh=first), SceneNode("b", mesh=copy), SceneNode("c", mesh=copy)]

    result = MeshDeduplicator().deduplicate(nodes)

    assert result.unique == 1
    assert result.instanced == 2
    assert all(node.mesh is first for node in nodes)
