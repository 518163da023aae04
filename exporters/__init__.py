#!/usr/bin/env python3
"""
Exporters Module
Writers for converted SceneData
"""

from .base_exporter import BaseExporter
from .json_exporter import JSONExporter

__all__ = [
    'BaseExporter',
    'JSONExporter',
]
