#!/usr/bin/env python3
"""
Blender To Unity Converter - Command Line Version
Converts JSON scene descriptions from Blender's right-handed Z-up convention
to Unity's left-handed Y-up convention, and instances duplicated meshes.
"""

import argparse
import sys
from pathlib import Path

from blend_converter import BlenderSceneConverter
from core.import_options import KEYWORDS
from readers import SceneFormatError, create_reader, is_supported_format


def build_keywords(args):
    """Split --keywords into a keyword list

    Returns None to let the converter use the keywords of the scene's source path.
    """
    if args.keywords is None:
        return None
    return args.keywords.split('.')


def main():
    parser = argparse.ArgumentParser(
        prog='b2u',
        description='Convert Blender scene descriptions to the Unity coordinate system',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert using the keywords found in the scene's source path
  python b2u.py car.json car_unity.json

  # Explicit keywords: instance meshes and turn the model around
  python b2u.py car.json car_unity.json --keywords opt.zreverse

  # Only instance duplicated meshes across several scenes
  python b2u.py --optimize-only level_a.json level_b.json --output-dir ./optimized

Keywords:
  """ + "  ".join(sorted(KEYWORDS))
    )

    parser.add_argument('files', nargs='+',
                        help='INPUT OUTPUT, or the input files with --optimize-only (.json)')
    parser.add_argument('--keywords', type=str,
                        help='Dot separated importer keywords, overriding the source path')
    parser.add_argument('--threshold', type=float,
                        help='Float fix threshold (default: 1.53e-05)')
    parser.add_argument('--optimize-only', action='store_true',
                        help='Only instance duplicated meshes across all inputs')
    parser.add_argument('--output-dir', type=str,
                        help='Output directory for --optimize-only')

    args = parser.parse_args()

    inputs = list(args.files)
    output = None
    if not args.optimize_only:
        if len(inputs) != 2:
            print("Error: Please specify one input and one output file", file=sys.stderr)
            sys.exit(1)
        output = inputs.pop()

    for input_file in inputs:
        path = Path(input_file)
        if not path.exists():
            print(f"Error: Input file not found: {input_file}", file=sys.stderr)
            sys.exit(1)
        if not is_supported_format(path):
            print(f"Error: Unsupported file format: {path.suffix}", file=sys.stderr)
            sys.exit(1)

    converter = BlenderSceneConverter()

    try:
        if args.optimize_only:
            from exporters.json_exporter import JSONExporter

            if not args.output_dir:
                print("Error: Please specify --output-dir <directory>", file=sys.stderr)
                sys.exit(1)

            scenes = [create_reader(input_file).read_scene() for input_file in inputs]
            results = converter.optimize_scene(scenes)
            exporter = JSONExporter()
            for input_file, scene in zip(inputs, scenes):
                export = exporter.export(scene, args.output_dir, Path(input_file).stem)
                if not export['success']:
                    results['success'] = False
                    results['message'] = f"Could not write {input_file}: {export['message']}"
        else:
            results = converter.convert_file(inputs[0], output, float_threshold=args.threshold,
                                             keywords=build_keywords(args))

    except SceneFormatError as e:
        print(f"\n✗ Invalid scene file: {e}", file=sys.stderr)
        sys.exit(1)

    if results.get('success'):
        print("\n" + "=" * 60)
        print("✓ Conversion completed successfully!")
        if 'instanced' in results:
            print(f"✓ Meshes: {results['unique']} unique, {results['instanced']} instanced")
        if results.get('output_file'):
            print(f"✓ Output: {results['output_file']}")
        print("=" * 60)
    else:
        print(f"\n✗ Conversion failed: {results.get('message', 'Check log above')}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
