#!/usr/bin/env python3
"""
Blender Scene Converter - Main Orchestrator Module
Runs the conversion engine over one imported hierarchy, or instances meshes
across a whole scene.

Processing order for a hierarchy:
1. Rebase transforms and meshes (HierarchyWalker)
2. Rebase animation curves using the same depth classification
3. Instance identical meshes (after all geometry has been rotated)

Every invocation produces one report, flushed as a single block.
"""

import traceback
from pathlib import Path

from core.animation_rebaser import AnimationCurveRebaser
from core.hierarchy import HierarchyWalker
from core.import_log import ImportLog
from core.import_options import ImportOptions, clean_object_name, is_blend_asset
from core.mesh_dedup import MeshDeduplicator
from core.scene_data import SceneData


class BlenderSceneConverter:
    """Scene conversion orchestrator (facade)

    Wires the option set, the report buffer and the engine components together.
    Nothing here is fatal for the caller: failures are reported in the returned
    results and in the log.
    """

    def __init__(self, progress_callback=None):
        """Initialize converter

        Args:
            progress_callback: Optional function receiving each flushed report
                              Signature: callback(message: str) -> None
        """
        self.progress_callback = progress_callback
        self.log = ImportLog(progress_callback)

    def process_hierarchy(self, scene: SceneData, options: ImportOptions = None):
        """Convert an imported hierarchy and its clips in place

        Args:
            scene: Hierarchy root and its animation clips
            options: Conversion options (defaults: geometry, animation and float fix)

        Returns:
            dict: Results with keys:
                - 'success': bool
                - 'depths': binding path -> Depth of every converted node
                - 'unique', 'instanced': mesh counts when optimizing
                - 'warnings': warning lines of the report
                - 'report': the flushed report text
                - 'message': summary message
        """
        options = options or ImportOptions()
        results = {'success': False, 'depths': {}, 'warnings': [], 'message': ''}

        if not options.enabled:
            results['success'] = True
            results['message'] = "Nothing to do"
            return results

        self.log.clear()
        try:
            self.log.info(
                f"BLENDER SCENE CONVERTER:  {clean_object_name(scene.root.name)}   "
                f"Options: {' '.join(options.keywords)}"
            )
            self.log.info("")

            if options.fix_geometry:
                walker = HierarchyWalker(options, self.log)
                results['depths'] = walker.walk(scene.root)

                if options.fix_animation:
                    rebaser = AnimationCurveRebaser(options, results['depths'], self.log)
                    rebaser.process_clips(scene.clips)

                self.log.info("Blender file imported successfully.")

            if options.optimize:
                nodes = [node for node in scene.root.iter_tree() if node.mesh is not None]
                self.log.info(f"{len(nodes)} meshes loaded. Searching for duplicates...")
                results.update(self._optimize(nodes))

            results['success'] = True
            results['message'] = f"Converted {scene.name}"

        except Exception as e:
            self.log.info(f"ERROR: {str(e)}")
            self.log.info(traceback.format_exc())
            results['message'] = f"Conversion failed: {str(e)}"

        results['warnings'] = self.log.warnings
        results['report'] = self.log.flush()
        return results

    def optimize_scene(self, scenes):
        """Instance duplicated meshes across every hierarchy of a scene

        Args:
            scenes: Iterable of SceneData making up the open scene

        Returns:
            dict: Results with 'success', 'unique', 'instanced', 'report', 'message'
        """
        self.log.clear()
        nodes = [node for scene in scenes for node in scene.root.iter_tree()
                 if node.mesh is not None]

        self.log.info(f"{len(nodes)} meshes found in the scene. Searching for duplicates...")
        results = self._optimize(nodes)
        results['success'] = True
        results['message'] = f"{results['unique']} unique meshes"
        results['report'] = self.log.flush()
        return results

    def _optimize(self, nodes):
        outcome = MeshDeduplicator(self.log).deduplicate(nodes)

        if outcome.instanced > 0:
            self.log.info(
                f"{outcome.instanced} duplicated meshes found and instanced. "
                f"Total {outcome.unique} unique meshes."
            )
        else:
            self.log.info("No instances found. All meshes are unique.")

        return {'unique': outcome.unique, 'instanced': outcome.instanced}

    def convert_file(self, input_file, output_file, options: ImportOptions = None,
                     float_threshold=None, keywords=None):
        """Read a scene file, convert it and write the result

        Options default to the keywords found in the source asset path recorded
        in the scene file, or to the standard options when it carries none.

        Args:
            input_file: Scene file (.json)
            output_file: Destination file (.json)
            options: Explicit options, overriding the path keywords
            keywords: Explicit keywords, overriding the path keywords (ignored
                      when options are given)
            float_threshold: Optional float fix threshold override

        Returns:
            dict: process_hierarchy() results plus 'output_file'
        """
        # Lazy imports keep the engine usable without the file layer
        from readers import create_reader
        from exporters.json_exporter import JSONExporter

        scene = create_reader(input_file).read_scene()
        # Geometry fixing defaults on only for Blender sources
        is_blend = is_blend_asset(scene.name)
        if options is None and keywords is not None:
            options = ImportOptions.from_keywords(keywords, is_blend_file=is_blend)
        if options is None:
            options = (ImportOptions.from_asset_path(scene.name)
                       or ImportOptions(fix_geometry=is_blend))
        if float_threshold is not None:
            options.float_threshold = float_threshold

        results = self.process_hierarchy(scene, options)
        if not results['success']:
            return results

        exporter = JSONExporter(self.progress_callback)
        export = exporter.export(scene, Path(output_file).parent, Path(output_file).stem)
        results['output_file'] = export.get('json_file')
        results['success'] = export.get('success', False)
        return results
