#!/usr/bin/env python3
"""
Mesh Commands Module
Per-object commands appended to object names in the modeling tool.

Commands follow the object name, each introduced by a double dash:

    fence_hull --norend--coll

Supported commands:
- norend:   remove the mesh renderer (invisible geometry, e.g. collision hulls)
- coll:     add a mesh collider
- collconv: add a convex mesh collider
"""

from typing import List, Tuple

from .scene_data import Collider, SceneNode

COMMAND_MARKER = "--"

MESH_COMMANDS = ('norend', 'coll', 'collconv')


def parse_mesh_commands(name: str) -> Tuple[str, List[str]]:
    """Split trailing commands off an object name

    Commands are consumed from the end of the name until no marker remains.
    Unknown commands are stripped but not returned.

    Args:
        name: Object name

    Returns:
        tuple: (clean_name, commands) where commands are in the order they were
               removed, i.e. last command first
    """
    name = name.lower()
    commands = []

    idx = name.rfind(COMMAND_MARKER)
    while idx != -1:
        token = name[idx + len(COMMAND_MARKER):].strip()
        name = name[:idx]
        if token in MESH_COMMANDS:
            commands.append(token)
        idx = name.rfind(COMMAND_MARKER)

    return name.rstrip(' _'), commands


def apply_mesh_commands(node: SceneNode) -> Tuple[str, List[str]]:
    """Apply the commands found in a node's name to the node

    The node keeps its name so animation bindings still resolve.

    Args:
        node: Node to modify

    Returns:
        tuple: (clean_name, applied_commands)
    """
    clean_name, commands = parse_mesh_commands(node.name)

    for command in commands:
        if command == 'norend':
            node.has_renderer = False
        elif command == 'coll':
            node.colliders.append(Collider(convex=False))
        elif command == 'collconv':
            node.colliders.append(Collider(convex=True))

    return clean_name, commands
