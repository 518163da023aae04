#!/usr/bin/env python3
"""
JSON Reader Module
Loads scene description files written by a modeling tool export script.

Layout:

    {
      "source": "Assets/Models/[importer.opt]/car.blend",
      "meshes": {
        "<key>": {"vertices": [[x, y, z], ...], "normals": [...], "tangents": [...],
                  "uv": [...], "uv2": [...], "submeshes": [[i0, i1, i2, ...], ...]}
      },
      "root": {
        "name": "car", "position": [x, y, z], "rotation": [x, y, z, w],
        "scale": [x, y, z], "mesh": "<key>" | null, "renderer": true,
        "colliders": [{"convex": false}], "children": [ ... ]
      },
      "clips": [
        {"name": "Take 001",
         "curves": [{"path": "body/wheel", "property": "rotation.x",
                     "keys": [[time, value, in_tangent, out_tangent], ...]}]}
      ]
    }

Nodes referencing the same mesh key share one MeshBuffer.
"""

import json
from typing import Dict

from .base_reader import BaseReader, SceneFormatError
from core.scene_data import (AnimationClip, AnimationCurve, Collider, CURVE_PROPERTIES,
                             Keyframe, MeshBuffer, SceneData, SceneNode)


class JSONReader(BaseReader):
    """Reader for JSON scene description files"""

    def get_format_name(self):
        return "JSON Scene"

    def read_scene(self) -> SceneData:
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SceneFormatError(f"Invalid JSON in {self.file_path}: {e}")

        if 'root' not in data:
            raise SceneFormatError(f"{self.file_path} has no 'root' node")

        meshes = {key: self._read_mesh(key, mesh) for key, mesh in data.get('meshes', {}).items()}
        root = self._read_node(data['root'], meshes)
        clips = [self._read_clip(clip) for clip in data.get('clips', [])]

        source = data.get('source') or f"{self.file_path.stem}.blend"
        return SceneData(name=source, root=root, clips=clips)

    def _read_mesh(self, key: str, data: dict) -> MeshBuffer:
        try:
            return MeshBuffer(
                name=data.get('name', key),
                vertices=data['vertices'],
                normals=data.get('normals'),
                tangents=data.get('tangents'),
                uv=data.get('uv'),
                uv2=data.get('uv2'),
                submeshes=data.get('submeshes'),
            )
        except (KeyError, ValueError) as e:
            raise SceneFormatError(f"Invalid mesh '{key}': {e}")

    def _read_node(self, data: dict, meshes: Dict[str, MeshBuffer]) -> SceneNode:
        mesh_key = data.get('mesh')
        if mesh_key is not None and mesh_key not in meshes:
            raise SceneFormatError(f"Node '{data.get('name')}' references unknown mesh '{mesh_key}'")

        try:
            node = SceneNode(
                name=data['name'],
                position=data.get('position', (0.0, 0.0, 0.0)),
                rotation=data.get('rotation', (0.0, 0.0, 0.0, 1.0)),
                scale=data.get('scale', (1.0, 1.0, 1.0)),
                mesh=meshes.get(mesh_key) if mesh_key is not None else None,
            )
        except (KeyError, ValueError) as e:
            raise SceneFormatError(f"Invalid node: {e}")

        node.has_renderer = bool(data.get('renderer', node.mesh is not None))
        node.colliders = [Collider(convex=bool(c.get('convex', False)))
                          for c in data.get('colliders', [])]

        for child in data.get('children', []):
            node.add_child(self._read_node(child, meshes))
        return node

    def _read_clip(self, data: dict) -> AnimationClip:
        clip = AnimationClip(name=data.get('name', 'Take 001'))
        for curve in data.get('curves', []):
            prop = curve.get('property')
            if prop not in CURVE_PROPERTIES:
                raise SceneFormatError(f"Unknown curve property '{prop}' in clip '{clip.name}'")
            keys = [Keyframe(*(float(v) for v in key)) for key in curve.get('keys', [])]
            clip.set_curve(curve.get('path', ''), prop, AnimationCurve(keys))
        return clip
