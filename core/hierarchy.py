#!/usr/bin/env python3
"""
Hierarchy Module
Decides which objects of an imported hierarchy are first-level and walks the
tree applying the spatial conversion.

A Blender file is imported in one of two shapes:

A) A single object: the root itself holds the mesh and carries the X-90
   rotation. The root is first-level; everything below it is nested.
B) Several objects: they are imported under an empty, unrotated parent. The
   parent must stay as it is; each direct child is first-level.

A single mesh too large for one buffer is split by the importer into children
named "<name>_MeshPart0", "<name>_MeshPart1"... under an empty root. That root
is really the single object of case A.
"""

import re
from enum import Enum
from typing import Dict, Optional

from .import_log import ImportLog
from .import_options import ImportOptions
from .mesh_geometry import MeshGeometryTransformer
from .scene_data import Depth, SceneNode
from .spatial_transformer import SpatialTransformer

SPLIT_MESH_PART = re.compile(r'^.*_MeshPart\d*$')


class HierarchyCase(Enum):
    """Shape of an imported hierarchy"""
    ROOT_IS_FIRST_LEVEL = "A"
    CHILDREN_ARE_FIRST_LEVEL = "B"


def is_split_mesh_part(name: str) -> bool:
    """True for names such as "wheel_MeshPart3" """
    return bool(SPLIT_MESH_PART.match(name))


def is_multipart_object(node: SceneNode) -> bool:
    """True when every direct child is a split mesh part

    A node without children qualifies trivially.
    """
    return all(is_split_mesh_part(child.name) for child in node.children)


class HierarchyClassifier:
    """Classifies a root node as case A or case B"""

    def __init__(self, force_fix_root: bool = False):
        self.force_fix_root = force_fix_root

    def classify(self, root: SceneNode) -> HierarchyCase:
        if self.force_fix_root or root.mesh is not None or is_multipart_object(root):
            return HierarchyCase.ROOT_IS_FIRST_LEVEL
        return HierarchyCase.CHILDREN_ARE_FIRST_LEVEL


class HierarchyWalker:
    """Applies the spatial conversion to a whole hierarchy, depth-first

    The depth assigned to each node is recorded by binding path so the
    animation pass can use exactly the same classification.
    """

    def __init__(self, options: ImportOptions, log: Optional[ImportLog] = None):
        """Initialize walker

        Args:
            options: Conversion options
            log: Report buffer
        """
        self.options = options
        self.log = log
        self.classifier = HierarchyClassifier(options.force_fix_root)
        self.geometry = MeshGeometryTransformer(log)
        self.transformer = SpatialTransformer(options, self.geometry, log)
        self.depths: Dict[str, Depth] = {}

    def _info(self, message):
        if self.log:
            self.log.info(message)

    def walk(self, root: SceneNode) -> Dict[str, Depth]:
        """Convert every node below (and possibly including) root

        Args:
            root: Root of the imported hierarchy

        Returns:
            dict: Binding path -> Depth for every converted node. A case B root
                  is left untouched and has no entry.
        """
        self.depths = {}
        self.geometry.reset()

        case = self.classifier.classify(root)
        if case is HierarchyCase.ROOT_IS_FIRST_LEVEL:
            self._info("Fixing X-90 rotation in root object...")
            self._convert_branch(root, root)
        else:
            self._info(f"Fixing X-90 rotation in {len(root.children)} objects...")
            for child in root.children:
                self._convert_branch(root, child)

        return self.depths

    def _convert_branch(self, root: SceneNode, first_level: SceneNode):
        self._apply(root, first_level, Depth.FIRST_LEVEL)
        self._convert_children(root, first_level)

    def _convert_children(self, root: SceneNode, node: SceneNode):
        for child in node.children:
            self._apply(root, child, Depth.NESTED)
            self._convert_children(root, child)

    def _apply(self, root: SceneNode, node: SceneNode, depth: Depth):
        self.transformer.apply(node, depth)
        self.depths[node.path_from(root)] = depth
