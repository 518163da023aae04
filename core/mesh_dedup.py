#!/usr/bin/env python3
"""
Mesh Deduplication Module
Replaces duplicated mesh buffers with references to a single instance.

Only meshes that are referenced end up in a build, so pointing every copy of a
mesh to one canonical buffer removes the copies altogether.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from .import_log import ImportLog
from .mesh_hash import calculate_mesh_hash, format_hash
from .scene_data import MeshBuffer, SceneNode


@dataclass
class DedupResult:
    """Outcome of a deduplication pass

    Attributes:
        unique: Number of distinct buffers kept
        instanced: Number of references redirected to an existing buffer
    """
    unique: int = 0
    instanced: int = 0


class MeshDeduplicator:
    """Groups mesh references by fingerprint and keeps the first buffer of each"""

    def __init__(self, log: Optional[ImportLog] = None, verbose: bool = False):
        self.log = log
        self.verbose = verbose

    def deduplicate(self, nodes: Iterable[SceneNode]) -> DedupResult:
        """Redirect duplicated meshes to their first occurrence

        Args:
            nodes: Nodes holding mesh references, in priority order. Nodes
                   without a mesh are skipped.

        Returns:
            DedupResult: Unique buffer and instanced reference counts
        """
        canonical: Dict[int, MeshBuffer] = {}
        # id(released buffer) -> (released buffer, buffer that replaced it)
        replaced: Dict[int, Tuple[MeshBuffer, MeshBuffer]] = {}
        result = DedupResult()

        for node in nodes:
            mesh = node.mesh
            if mesh is None:
                continue

            if id(mesh) in replaced:
                # Another node shared this buffer before it was released
                node.mesh = replaced[id(mesh)][1]
                result.instanced += 1
                continue

            key = calculate_mesh_hash(mesh)
            existing = canonical.get(key)

            if existing is None:
                canonical[key] = mesh
            elif existing is not mesh:
                mesh.release()
                replaced[id(mesh)] = (mesh, existing)
                node.mesh = existing
                result.instanced += 1
                if self.verbose and self.log:
                    self.log.info(
                        f"Mesh: {node.name} is identical to: {existing.name} (#{format_hash(key)})"
                    )

        result.unique = len(canonical)
        return result
