#!/usr/bin/env python3
"""
Spatial Transformer Module
Rebases the local transform and mesh of a single node.

Blender stores objects right-handed and Z-up; the engine is left-handed and
Y-up. When the scene is brought in, every first-level object arrives with an
X-90 rotation baked into its transform. First-level objects get that rotation
cancelled (and their mesh counter-rotated), while nested objects are
re-expressed relative to their now unrotated parent.
"""

from typing import Optional

import numpy as np

from . import rotations
from .float_snap import snap_vector
from .import_log import ImportLog
from .import_options import ImportOptions
from .mesh_commands import apply_mesh_commands
from .mesh_geometry import MeshGeometryTransformer
from .scene_data import Depth, SceneNode


def convert_rotation(q) -> np.ndarray:
    """Right-handed Z-up quaternion to left-handed Y-up"""
    x, y, z, w = q
    return np.array([-x, -z, y, -w])


def revert_rotation(q) -> np.ndarray:
    """Inverse of convert_rotation"""
    x, y, z, w = q
    return np.array([-x, z, -y, -w])


def rotation_fix_180(q) -> np.ndarray:
    """Turn a local rotation around the up axis (X and Z components flip)"""
    x, y, z, w = q
    return np.array([-x, y, -z, w])


def convert_scale(scale) -> np.ndarray:
    """Swap the Y and Z scale components"""
    x, y, z = scale
    return np.array([x, z, y])


def fix_float_values(node: SceneNode, threshold: float):
    """Snap position, Euler angles and scale of a node to integers when close

    The rotation is only rewritten when an Euler angle actually changed, and it
    keeps the sign of the original quaternion.
    """
    node.position = snap_vector(node.position, threshold)
    node.scale = snap_vector(node.scale, threshold)

    euler = rotations.to_euler(node.rotation)
    snapped = snap_vector(euler, threshold)
    if not np.array_equal(euler, snapped):
        q = rotations.from_euler(snapped)
        if np.dot(q, node.rotation) < 0.0:
            q = -q
        node.rotation = q


class SpatialTransformer:
    """Applies the per-node conversion for a given depth"""

    def __init__(self, options: ImportOptions, geometry: Optional[MeshGeometryTransformer] = None,
                 log: Optional[ImportLog] = None):
        """Initialize transformer

        Args:
            options: Conversion options (turn around, float fix, mesh commands)
            geometry: Mesh rotator shared across the walk
            log: Report buffer for mesh command lines
        """
        self.options = options
        self.log = log
        self.geometry = geometry or MeshGeometryTransformer(log)
        self.compound = rotations.compound_rotation(options.turn_around)

    def apply(self, node: SceneNode, depth: Depth):
        if depth is Depth.FIRST_LEVEL:
            self.process_first_level(node)
        else:
            self.process_nested(node)

    def process_first_level(self, node: SceneNode):
        """Cancel the X-90 rotation baked into a first-level object"""
        node.rotation = rotations.multiply(node.rotation, rotations.angle_axis(90.0, rotations.RIGHT))

        # Counter-rotate the mesh. With turn-around the half turn is folded in
        # so the buffer is only touched once.
        self.geometry.rotate(node.mesh, self.compound)

        if self.options.turn_around:
            node.position = rotations.rotate_vectors(rotations.turn_around(), node.position)
            node.rotation = rotation_fix_180(node.rotation)

        node.scale = convert_scale(node.scale)
        self._post_process(node)

    def process_nested(self, node: SceneNode):
        """Re-express a second-level or deeper object under its rebased parent"""
        node.position = rotations.rotate_vectors(self.compound, node.position)
        self.geometry.rotate(node.mesh, self.compound)

        node.rotation = convert_rotation(node.rotation)
        if self.options.turn_around:
            node.rotation = rotation_fix_180(node.rotation)

        node.scale = convert_scale(node.scale)
        self._post_process(node)

    def _post_process(self, node: SceneNode):
        if self.options.apply_mesh_commands:
            clean_name, commands = apply_mesh_commands(node)
            if commands and self.log:
                self.log.info(f"Mesh commands: {clean_name}  [{' '.join(commands)}]")

        if self.options.fix_floats:
            fix_float_values(node, self.options.float_threshold)
