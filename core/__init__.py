#!/usr/bin/env python3
"""
Core Module
Coordinate conversion and mesh instancing engine.

Converts hierarchies authored right-handed Z-up (Blender) into the left-handed
Y-up convention of the engine, and instances identical meshes.
"""

from .scene_data import (
    SceneData,
    SceneNode,
    MeshBuffer,
    Bounds,
    Collider,
    Keyframe,
    AnimationCurve,
    AnimationClip,
    CurveBinding,
    Depth,
)
from .import_options import ImportOptions, clean_object_name, is_blend_asset
from .import_log import ImportLog
from .float_snap import snap_float, snap_vector
from .mesh_geometry import MeshGeometryTransformer, rotate_mesh, calculate_tangents
from .mesh_commands import parse_mesh_commands, apply_mesh_commands
from .spatial_transformer import SpatialTransformer, convert_rotation, revert_rotation
from .hierarchy import HierarchyClassifier, HierarchyWalker, HierarchyCase
from .animation_rebaser import AnimationCurveRebaser, CurveSetError, fetch_curve_set
from .mesh_hash import calculate_mesh_hash, vertex_shape_term
from .mesh_dedup import MeshDeduplicator, DedupResult

__all__ = [
    'SceneData',
    'SceneNode',
    'MeshBuffer',
    'Bounds',
    'Collider',
    'Keyframe',
    'AnimationCurve',
    'AnimationClip',
    'CurveBinding',
    'Depth',
    'ImportOptions',
    'clean_object_name',
    'is_blend_asset',
    'ImportLog',
    'snap_float',
    'snap_vector',
    'MeshGeometryTransformer',
    'rotate_mesh',
    'calculate_tangents',
    'parse_mesh_commands',
    'apply_mesh_commands',
    'SpatialTransformer',
    'convert_rotation',
    'revert_rotation',
    'HierarchyClassifier',
    'HierarchyWalker',
    'HierarchyCase',
    'AnimationCurveRebaser',
    'CurveSetError',
    'fetch_curve_set',
    'calculate_mesh_hash',
    'vertex_shape_term',
    'MeshDeduplicator',
    'DedupResult',
]
