#!/usr/bin/env python3
"""
Tests for the import pipeline: option keywords, mesh command parsing, the
converter facade and the JSON scene round trip.
"""

import json
import sys

import numpy as np
import pytest

import b2u
from blend_converter import BlenderSceneConverter
from core.import_options import ImportOptions, clean_object_name
from core.mesh_commands import parse_mesh_commands
from core.scene_data import (AnimationClip, AnimationCurve, Keyframe, MeshBuffer, SceneData,
                             SceneNode)
from exporters import JSONExporter
from readers import JSONReader, SceneFormatError, create_reader


def make_mesh(name):
    return MeshBuffer(name, vertices=[[0, 0, 0], [1, 0, 0], [0, 0, 1]],
                      normals=[[0, -1, 0]] * 3, submeshes=[[0, 1, 2]])


# Options -------------------------------------------------------------------------

def test_options_from_asset_path():
    options = ImportOptions.from_asset_path("Assets/Cars/[importer.opt.zreverse.bogus]/car.blend")
    assert options.fix_geometry and options.optimize and options.turn_around
    assert options.fix_animation and options.fix_floats
    assert options.keywords == ["opt", "zreverse"]


def test_options_require_importer_tag():
    assert ImportOptions.from_asset_path("Assets/Cars/car.blend") is None
    assert ImportOptions.from_asset_path("Assets/[opt]/car.blend") is None


def test_options_last_group_wins():
    options = ImportOptions.from_asset_path("Assets/[importer.opt]/car [importer.nomods].blend")
    assert not options.optimize
    assert not options.apply_mesh_commands


def test_options_non_blend_files_skip_fix():
    options = ImportOptions.from_asset_path("Assets/[importer.opt]/car.fbx")
    assert not options.fix_geometry and options.optimize
    forced = ImportOptions.from_asset_path("Assets/[importer.forcefix]/car.fbx")
    assert forced.fix_geometry


def test_options_disable_keywords():
    options = ImportOptions.from_keywords(["skipfix", "noanimfix", "nofloatfix", "forcefixroot"])
    assert not options.fix_geometry and not options.fix_animation and not options.fix_floats
    assert options.force_fix_root
    assert not options.enabled


def test_clean_object_name():
    assert clean_object_name("Car [importer.opt]") == "car"
    assert clean_object_name("Car") == "Car"


# Mesh commands -------------------------------------------------------------------

def test_parse_two_commands():
    name, commands = parse_mesh_commands("_hull --norend--coll")
    assert name == "_hull"
    assert commands == ["coll", "norend"]


def test_parse_ignores_unknown_commands():
    name, commands = parse_mesh_commands("Rock__--collconv--shiny")
    assert name == "rock"
    assert commands == ["collconv"]


def test_parse_without_commands():
    assert parse_mesh_commands("Wheel_") == ("wheel", [])


# Converter -----------------------------------------------------------------------

def make_scene():
    root = SceneNode("Crate [importer.opt]")
    for i in range(3):
        child = root.add_child(SceneNode(f"crate{i}", position=(i, 0, 2), mesh=make_mesh(f"m{i}")))
        child.add_child(SceneNode("lid", position=(0, 0, 1)))

    # Complete position and scale groups, rotation lacks its w curve
    clip = AnimationClip("Take 001")
    for channel in ("position.x", "position.y", "position.z", "scale.x", "scale.y", "scale.z",
                    "rotation.x", "rotation.y", "rotation.z"):
        clip.set_curve("crate0", channel, AnimationCurve([Keyframe(0, 0.0)]))
    return SceneData("crate.blend", root, [clip])


def test_process_hierarchy_reports_once():
    reports = []
    converter = BlenderSceneConverter(progress_callback=reports.append)
    results = converter.process_hierarchy(make_scene(), ImportOptions(optimize=True, keywords=["opt"]))

    assert results['success']
    assert results['unique'] == 1
    assert results['instanced'] == 2
    assert len(results['warnings']) == 1
    assert len(reports) == 1
    report = reports[0]
    assert report.startswith("BLENDER SCENE CONVERTER:  crate   Options: opt")
    assert "Fixing X-90 rotation in 3 objects..." in report
    assert "2 duplicated meshes found and instanced. Total 1 unique meshes." in report


def test_process_hierarchy_converts_nested_positions():
    scene = make_scene()
    BlenderSceneConverter().process_hierarchy(scene)
    lid = scene.root.children[0].children[0]
    assert lid.position.tolist() == [0.0, 1.0, 0.0]
    # First-level position is kept (the parent is not rotated)
    assert scene.root.children[1].position.tolist() == [1.0, 0.0, 2.0]


def test_process_hierarchy_disabled_options():
    scene = make_scene()
    results = BlenderSceneConverter().process_hierarchy(scene, ImportOptions(fix_geometry=False))
    assert results['success']
    assert results['message'] == "Nothing to do"
    assert scene.root.children[0].children[0].position.tolist() == [0.0, 0.0, 1.0]


def test_optimize_scene_across_hierarchies():
    scenes = [make_scene(), make_scene()]
    results = BlenderSceneConverter().optimize_scene(scenes)
    assert results['success']
    assert results['unique'] == 1
    assert results['instanced'] == 5
    assert "6 meshes found in the scene. Searching for duplicates..." in results['report']


# JSON round trip -----------------------------------------------------------------

def write_scene_file(path, source):
    mesh = {"vertices": [[0, 0, 0], [1, 0, 0], [0, 0, 1]], "normals": [[0, -1, 0]] * 3,
            "submeshes": [[0, 1, 2]]}
    data = {
        "source": source,
        "meshes": {"a": mesh, "b": dict(mesh)},
        "root": {
            "name": "crates",
            "children": [
                {"name": "crate_a", "mesh": "a", "position": [0, 0, 1],
                 "children": [{"name": "lid--coll", "position": [0, 0, 2]}]},
                {"name": "crate_b", "mesh": "b"},
            ],
        },
        "clips": [{"name": "open", "curves": [
            {"path": "crate_a/lid--coll", "property": f"position.{axis}",
             "keys": [[0, 0, 0, 0], [1, value, 1, 1]]}
            for axis, value in zip("xyz", (0, 0, 3))
        ]}],
    }
    path.write_text(json.dumps(data), encoding="utf-8")


def test_convert_file_round_trip(tmp_path):
    source = tmp_path / "crates.json"
    write_scene_file(source, "Assets/[importer.opt]/crates.blend")
    output = tmp_path / "out" / "crates_unity.json"

    results = BlenderSceneConverter().convert_file(source, output)
    assert results['success']
    assert results['instanced'] == 1

    scene = JSONReader(results['output_file']).read_scene()
    crate_a, crate_b = scene.root.children
    assert crate_a.mesh is crate_b.mesh
    assert len(scene.get_meshes()) == 1

    lid = crate_a.children[0]
    assert lid.position.tolist() == [0.0, 2.0, 0.0]
    assert len(lid.colliders) == 1

    keys = scene.clips[0].get_curve("crate_a/lid--coll", "position.y").keys
    assert keys[1].value == 3.0
    assert np.allclose(crate_a.mesh.vertices[2], [0, 1, 0], atol=1e-12)


def test_reader_rejects_unknown_mesh(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"root": {"name": "r", "mesh": "missing"}}), encoding="utf-8")
    with pytest.raises(SceneFormatError):
        create_reader(path).read_scene()


def test_create_reader_unsupported_extension():
    with pytest.raises(ValueError):
        create_reader("scene.blend")


def test_cli_converts_file(tmp_path, monkeypatch):
    source = tmp_path / "crates.json"
    write_scene_file(source, "crates.blend")
    output = tmp_path / "converted.json"

    monkeypatch.setattr(sys, "argv", ["b2u", str(source), str(output), "--keywords", "opt"])
    b2u.main()

    data = json.loads(output.read_text(encoding="utf-8"))
    assert len(data["meshes"]) == 1


def test_convert_file_non_blend_source_skips_fix(tmp_path):
    source = tmp_path / "car.json"
    write_scene_file(source, "Assets/car.fbx")
    output = tmp_path / "car_unity.json"

    results = BlenderSceneConverter().convert_file(source, output)
    assert results['success']
    assert results['message'] == "Nothing to do"

    lid = JSONReader(output).read_scene().root.children[0].children[0]
    assert lid.position.tolist() == [0.0, 0.0, 2.0]


def test_convert_file_keywords_on_non_blend_source(tmp_path):
    source = tmp_path / "car.json"
    write_scene_file(source, "Assets/car.fbx")
    output = tmp_path / "car_unity.json"

    results = BlenderSceneConverter().convert_file(source, output, keywords=["opt"])
    assert results['instanced'] == 1

    scene = JSONReader(output).read_scene()
    assert scene.root.children[0].children[0].position.tolist() == [0.0, 0.0, 2.0]
    assert len(scene.get_meshes()) == 1


def test_exporter_keeps_meshes_with_clashing_names():
    root = SceneNode("root")
    for i, name in enumerate(("a.2", "a", "a")):
        mesh = make_mesh(name)
        mesh.vertices[0] = (i, i, i)
        root.add_child(SceneNode(f"n{i}", mesh=mesh))

    data = JSONExporter().to_dict(SceneData("scene.blend", root))

    keys = [child['mesh'] for child in data['root']['children']]
    assert len(set(keys)) == 3
    assert len(data['meshes']) == 3
    for i, key in enumerate(keys):
        assert data['meshes'][key]['vertices'][0] == [i, i, i]


def test_cli_optimize_only_reports_write_failure(tmp_path, monkeypatch):
    source = tmp_path / "crates.json"
    write_scene_file(source, "crates.blend")
    blocker = tmp_path / "taken"
    blocker.write_text("", encoding="utf-8")

    monkeypatch.setattr(sys, "argv", ["b2u", "--optimize-only", str(source),
                                      "--output-dir", str(blocker)])
    with pytest.raises(SystemExit) as info:
        b2u.main()
    assert info.value.code == 1
