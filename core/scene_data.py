#!/usr/bin/env python3
"""
Scene Data Module
In-memory scene representation consumed and mutated by the converter.

Readers build these structures, the conversion engine mutates them in place,
and exporters serialize them back. Mesh buffers are shared by reference between
nodes, which is exactly what instance optimization relies on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional

import numpy as np


class Depth(Enum):
    """Depth classification of a node inside an imported hierarchy"""
    FIRST_LEVEL = "first_level"
    NESTED = "nested"


def _vec(values, size):
    return np.asarray(values, dtype=np.float64).reshape(size)


def _array(values, width):
    if values is None:
        return np.zeros((0, width), dtype=np.float64)
    return np.asarray(values, dtype=np.float64).reshape(-1, width)


@dataclass
class Bounds:
    """Axis-aligned bounding box

    Attributes:
        min: [x, y, z] lower corner
        max: [x, y, z] upper corner
    """
    min: np.ndarray = field(default_factory=lambda: np.zeros(3))
    max: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @property
    def extent(self) -> np.ndarray:
        return self.max - self.min

    @classmethod
    def from_points(cls, points: np.ndarray) -> 'Bounds':
        """Compute the bounds enclosing a set of points

        Args:
            points: (N, 3) array. An empty array yields zero bounds.

        Returns:
            Bounds: New bounds instance
        """
        if len(points) == 0:
            return cls()
        return cls(points.min(axis=0).copy(), points.max(axis=0).copy())


class MeshBuffer:
    """Mesh geometry shared by reference among scene nodes

    Attributes:
        name: Mesh asset name
        vertices: (N, 3) vertex positions
        normals: (N, 3) vertex normals
        tangents: (N, 4) tangents with handedness in w, or empty
        uv: (N, 2) first UV channel, or empty
        uv2: (N, 2) second UV channel, or empty
        submeshes: One flat triangle index array per submesh
        bounds: Bounds of the current vertex data
        released: True once the buffer has been discarded as a duplicate
    """

    def __init__(self, name, vertices, normals=None, tangents=None, uv=None, uv2=None,
                 submeshes=None):
        self.name = name
        self.vertices = _array(vertices, 3)
        self.normals = _array(normals, 3)
        self.tangents = _array(tangents, 4)
        self.uv = _array(uv, 2)
        self.uv2 = _array(uv2, 2)
        self.submeshes = [np.asarray(s, dtype=np.int64).reshape(-1) for s in (submeshes or [])]
        self.released = False

        if len(self.normals) and len(self.normals) != len(self.vertices):
            raise ValueError(
                f"Mesh '{name}' has {len(self.vertices)} vertices but {len(self.normals)} normals"
            )

        self.bounds = Bounds()
        self.recalculate_bounds()

    def __repr__(self):
        return f"<MeshBuffer {self.name} v={len(self.vertices)} sub={len(self.submeshes)}>"

    @property
    def triangles(self) -> np.ndarray:
        """All submesh triangle indices concatenated"""
        if not self.submeshes:
            return np.zeros(0, dtype=np.int64)
        return np.concatenate(self.submeshes)

    @property
    def has_tangents(self) -> bool:
        return len(self.tangents) > 0

    def recalculate_bounds(self):
        self.bounds = Bounds.from_points(self.vertices)

    def release(self):
        """Discard the buffer contents (the mesh is no longer referenced)"""
        self.vertices = np.zeros((0, 3))
        self.normals = np.zeros((0, 3))
        self.tangents = np.zeros((0, 4))
        self.uv = np.zeros((0, 2))
        self.uv2 = np.zeros((0, 2))
        self.submeshes = []
        self.bounds = Bounds()
        self.released = True


@dataclass
class Collider:
    """Mesh collider attached to a node by a mesh command"""
    convex: bool = False


class SceneNode:
    """Node of an imported hierarchy

    Attributes:
        name: Object name as authored (may carry trailing mesh commands)
        position: Local position [x, y, z]
        rotation: Local rotation quaternion [x, y, z, w]
        scale: Local scale [x, y, z]
        mesh: Optional MeshBuffer, possibly shared with other nodes
        has_renderer: Whether the mesh is rendered
        colliders: Colliders added to the node
        children: Ordered child nodes
        parent: Owning node, None for the root
    """

    def __init__(self, name, position=(0.0, 0.0, 0.0), rotation=(0.0, 0.0, 0.0, 1.0),
                 scale=(1.0, 1.0, 1.0), mesh: Optional[MeshBuffer] = None,
                 has_renderer: bool = True):
        self.name = name
        self.position = _vec(position, 3)
        self.rotation = _vec(rotation, 4)
        self.scale = _vec(scale, 3)
        self.mesh = mesh
        self.has_renderer = has_renderer if mesh is not None else False
        self.colliders: List[Collider] = []
        self.children: List['SceneNode'] = []
        self.parent: Optional['SceneNode'] = None

    def __repr__(self):
        return f"<SceneNode {self.name} children={len(self.children)}>"

    def add_child(self, child: 'SceneNode') -> 'SceneNode':
        child.parent = self
        self.children.append(child)
        return child

    def iter_tree(self) -> Iterator['SceneNode']:
        """Yield this node and all descendants, depth-first"""
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def path_from(self, root: 'SceneNode') -> str:
        """Binding path of this node relative to root ("" for the root itself)

        Args:
            root: Ancestor the path is relative to

        Returns:
            str: Slash separated child names

        Raises:
            ValueError: If root is not an ancestor of this node
        """
        names = []
        node = self
        while node is not root:
            if node is None:
                raise ValueError(f"{root.name} is not an ancestor of {self.name}")
            names.append(node.name)
            node = node.parent
        return "/".join(reversed(names))


@dataclass
class Keyframe:
    """Single curve keyframe

    Attributes:
        time: Key time in seconds
        value: Curve value at time
        in_tangent: Incoming slope
        out_tangent: Outgoing slope
    """
    time: float
    value: float
    in_tangent: float = 0.0
    out_tangent: float = 0.0

    def invert_tangents(self):
        self.in_tangent = -self.in_tangent
        self.out_tangent = -self.out_tangent


@dataclass
class AnimationCurve:
    """Ordered keyframes of one animated float property"""
    keys: List[Keyframe] = field(default_factory=list)

    def __len__(self):
        return len(self.keys)


class CurveBinding(NamedTuple):
    """Target of a curve: node path plus property (e.g. "rotation.w")"""
    path: str
    property: str


POSITION_CHANNELS = ('position.x', 'position.y', 'position.z')
ROTATION_CHANNELS = ('rotation.x', 'rotation.y', 'rotation.z', 'rotation.w')
SCALE_CHANNELS = ('scale.x', 'scale.y', 'scale.z')
CURVE_PROPERTIES = POSITION_CHANNELS + ROTATION_CHANNELS + SCALE_CHANNELS


@dataclass
class AnimationClip:
    """Named animation clip holding one curve per binding

    Attributes:
        name: Clip name
        curves: Mapping of CurveBinding -> AnimationCurve
    """
    name: str
    curves: Dict[CurveBinding, AnimationCurve] = field(default_factory=dict)

    def get_curve(self, path: str, prop: str) -> Optional[AnimationCurve]:
        return self.curves.get(CurveBinding(path, prop))

    def set_curve(self, path: str, prop: str, curve: AnimationCurve):
        self.curves[CurveBinding(path, prop)] = curve

    def animated_paths(self) -> List[str]:
        """Unique node paths referenced by this clip, in first-seen order"""
        paths = []
        for binding in self.curves:
            if binding.path not in paths:
                paths.append(binding.path)
        return paths


@dataclass
class SceneData:
    """A hierarchy and the clips animating it

    Attributes:
        name: Asset name (usually the source file stem or path)
        root: Root node of the hierarchy
        clips: Animation clips bound to the hierarchy
    """
    name: str
    root: SceneNode
    clips: List[AnimationClip] = field(default_factory=list)

    def get_meshes(self) -> List[MeshBuffer]:
        """Unique mesh buffers referenced by the hierarchy, in traversal order"""
        meshes = []
        seen = set()
        for node in self.root.iter_tree():
            if node.mesh is not None and id(node.mesh) not in seen:
                seen.add(id(node.mesh))
                meshes.append(node.mesh)
        return meshes

