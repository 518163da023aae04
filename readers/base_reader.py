#!/usr/bin/env python3
"""
Base Reader Module
Abstract interface for reading scene files into SceneData
"""

from abc import ABC, abstractmethod
from pathlib import Path

from core.scene_data import SceneData


class SceneFormatError(ValueError):
    """The scene file content does not match the expected layout"""


class BaseReader(ABC):
    """Abstract base class for scene file readers

    Provides a consistent interface for loading scene files. Readers build the
    in-memory SceneData the conversion engine works on; they never convert.
    """

    def __init__(self, file_path: str):
        """Initialize reader with file path

        Args:
            file_path: Path to the scene file
        """
        self.file_path = Path(file_path)

    @abstractmethod
    def get_format_name(self) -> str:
        """Return human-readable format name (e.g., 'JSON Scene')"""
        pass

    @abstractmethod
    def read_scene(self) -> SceneData:
        """Load the file into SceneData

        Returns:
            SceneData: Hierarchy, shared meshes and clips

        Raises:
            SceneFormatError: If the file content is malformed
        """
        pass
