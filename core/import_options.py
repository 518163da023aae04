#!/usr/bin/env python3
"""
Import Options Module
Option set controlling a conversion run, and the asset path keywords that set it.

Options may be embedded in the asset file name or in the name of a folder
containing it, as a bracketed group of dot separated keywords:

    Assets/Models/[importer.opt.zreverse]/car.blend
    Assets/Models/tree [importer.nomods].blend

The last bracketed group in the path wins.
"""

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import List, Optional

from .float_snap import DEFAULT_THRESHOLD

IMPORTER_TAG = "importer"

# keyword -> (attribute, value)
KEYWORDS = {
    'skipfix': ('fix_geometry', False),
    'forcefix': ('fix_geometry', True),
    'opt': ('optimize', True),
    'zreverse': ('turn_around', True),
    'noanimfix': ('fix_animation', False),
    'nofloatfix': ('fix_floats', False),
    'nomods': ('apply_mesh_commands', False),
    'forcefixroot': ('force_fix_root', True),
}

BLEND_EXTENSION = '.blend'


@dataclass
class ImportOptions:
    """Conversion switches

    Attributes:
        fix_geometry: Rebase transforms, meshes and animation to the target convention
        optimize: Instance identical meshes after conversion
        turn_around: Turn the model 180 degrees around the up axis
        fix_animation: Rebase animation curves (requires fix_geometry)
        fix_floats: Snap near-integer transform values
        apply_mesh_commands: Interpret trailing mesh commands in object names
        force_fix_root: Treat the root as the first-level object regardless of its content
        float_threshold: Snapping distance used when fix_floats is set
        keywords: Recognised keywords, in the order found (for the report)
    """
    fix_geometry: bool = True
    optimize: bool = False
    turn_around: bool = False
    fix_animation: bool = True
    fix_floats: bool = True
    apply_mesh_commands: bool = True
    force_fix_root: bool = False
    float_threshold: float = DEFAULT_THRESHOLD
    keywords: List[str] = field(default_factory=list)

    @property
    def enabled(self) -> bool:
        """Whether the options request any processing at all"""
        return self.fix_geometry or self.optimize

    @classmethod
    def from_keywords(cls, keywords, is_blend_file: bool = True) -> 'ImportOptions':
        """Build options from a sequence of keywords

        Args:
            keywords: Iterable of keyword strings; unknown ones are ignored
            is_blend_file: Geometry fixing defaults on only for Blender files

        Returns:
            ImportOptions: Configured options
        """
        options = cls(fix_geometry=is_blend_file)
        for keyword in keywords:
            keyword = keyword.strip().lower()
            if keyword not in KEYWORDS:
                continue
            attr, value = KEYWORDS[keyword]
            setattr(options, attr, value)
            options.keywords.append(keyword)
        return options

    @classmethod
    def from_asset_path(cls, asset_path) -> Optional['ImportOptions']:
        """Parse the importer keywords embedded in an asset path

        Args:
            asset_path: Path of the imported asset

        Returns:
            ImportOptions, or None when the path carries no importer tag
        """
        path = str(asset_path).replace("\\", "/").lower()
        start = path.rfind('[')
        end = path.rfind(']')
        if start < 0 or end < 0 or start >= end:
            return None

        tokens = path[start + 1:end].split('.')
        if not tokens or tokens[0] != IMPORTER_TAG:
            return None

        return cls.from_keywords(tokens[1:], is_blend_file=is_blend_asset(path))


def is_blend_asset(asset_path) -> bool:
    """True when the asset path names a Blender file"""
    path = str(asset_path).replace("\\", "/").lower()
    return PurePosixPath(path).suffix == BLEND_EXTENSION


def clean_object_name(name: str) -> str:
    """Remove an "[importer...]" tag from an object name (report only)

    Args:
        name: Root object name, usually derived from the file name

    Returns:
        str: Lower-cased name without the tag, or the name unchanged
    """
    lowered = name.lower()
    start = lowered.find('[' + IMPORTER_TAG)
    end = lowered.find(']')
    if start < 0 or end < 0 or start >= end:
        return name
    return (lowered[:start] + lowered[end + 1:]).strip(' _')
