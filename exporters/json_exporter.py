#!/usr/bin/env python3
"""
JSON Exporter Module
Writes converted SceneData back to the JSON scene layout read by JSONReader.

Shared mesh buffers are written once and referenced by key from every node
using them, so instancing done by the converter survives the round trip.
"""

import json

from .base_exporter import BaseExporter
from core.scene_data import MeshBuffer, SceneData, SceneNode


class JSONExporter(BaseExporter):
    """Exporter for JSON scene description files"""

    def __init__(self, progress_callback=None, indent=None):
        super().__init__(progress_callback)
        self.indent = indent

    def get_format_name(self):
        return "JSON Scene"

    def get_file_extension(self):
        return "json"

    def export(self, scene_data: SceneData, output_path, shot_name):
        try:
            output_dir = self.validate_output_path(output_path)
            json_file = output_dir / f"{shot_name}.{self.get_file_extension()}"

            with open(json_file, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(scene_data), f, indent=self.indent)

            self.log(f"  Wrote {json_file}")
            return {
                'success': True,
                'json_file': str(json_file),
                'files': [str(json_file)],
                'message': f"Exported {len(scene_data.get_meshes())} meshes",
            }
        except (OSError, ValueError) as e:
            self.log(f"  ERROR writing JSON scene: {e}")
            return {'success': False, 'files': [], 'message': str(e)}

    def to_dict(self, scene_data: SceneData) -> dict:
        """Build the JSON document for a scene"""
        keys = {}
        meshes = {}
        for mesh in scene_data.get_meshes():
            key = mesh.name
            suffix = 1
            while key in meshes:
                key = f"{mesh.name}.{suffix}"
                suffix += 1
            keys[id(mesh)] = key
            meshes[key] = self._mesh_dict(mesh)

        return {
            'source': scene_data.name,
            'meshes': meshes,
            'root': self._node_dict(scene_data.root, keys),
            'clips': [
                {
                    'name': clip.name,
                    'curves': [
                        {
                            'path': binding.path,
                            'property': binding.property,
                            'keys': [[k.time, k.value, k.in_tangent, k.out_tangent]
                                     for k in curve.keys],
                        }
                        for binding, curve in clip.curves.items()
                    ],
                }
                for clip in scene_data.clips
            ],
        }

    def _mesh_dict(self, mesh: MeshBuffer) -> dict:
        data = {
            'name': mesh.name,
            'vertices': mesh.vertices.tolist(),
            'normals': mesh.normals.tolist(),
            'submeshes': [s.tolist() for s in mesh.submeshes],
        }
        for attr in ('tangents', 'uv', 'uv2'):
            values = getattr(mesh, attr)
            if len(values):
                data[attr] = values.tolist()
        return data

    def _node_dict(self, node: SceneNode, keys) -> dict:
        return {
            'name': node.name,
            'position': node.position.tolist(),
            'rotation': node.rotation.tolist(),
            'scale': node.scale.tolist(),
            'mesh': keys[id(node.mesh)] if node.mesh is not None else None,
            'renderer': node.has_renderer,
            'colliders': [{'convex': c.convex} for c in node.colliders],
            'children': [self._node_dict(child, keys) for child in node.children],
        }
