"""Tests for the on-disk project host and JSON scene loading."""

import json

import pytest

from aidock.models.scene import Resource
from aidock.services.editor_host import HostError, ProjectHost, join_res_path, parent_res_path

SCENE = {
    "name": "Level",
    "class": "Node2D",
    "properties": {"gravity": 9.8},
    "children": [
        {
            "name": "Sprite",
            "class": "Sprite2D",
            "scene_file": "res://sprite.tscn",
            "properties": {"texture": {"$resource": {"class": "CompressedTexture2D", "path": "res://icon.png"}}},
        },
    ],
}


def test_from_settings_loads_scene(project_dir):
    (project_dir / "level.json").write_text(json.dumps(SCENE))
    host = ProjectHost.from_settings(str(project_dir), "res://level.json")

    root = host.edited_scene_root()
    assert root.name == "Level"
    assert root.get("gravity") == 9.8
    sprite = root.get_child("Sprite")
    assert sprite.scene_file_path == "res://sprite.tscn"
    assert isinstance(sprite.get("texture"), Resource)
    assert host.instance_from_id(sprite.instance_id) is sprite


def test_without_scene_file_nothing_is_open(project_dir):
    assert ProjectHost.from_settings(str(project_dir)).edited_scene_root() is None


def test_invalid_scene_description(project_dir):
    (project_dir / "broken.json").write_text("{")
    with pytest.raises(HostError):
        ProjectHost(project_dir).load_scene("res://broken.json")


def test_paths_outside_project_are_refused(host):
    with pytest.raises(HostError):
        host.read_bytes("res://../../etc/passwd")


def test_refresh_index_lists_every_file(host):
    host.refresh_index()
    assert "res://scripts/enemies/Enemy_Goblin.gd" in host.indexed_files
    assert host.indexed_files == sorted(host.indexed_files)


@pytest.mark.parametrize("directory, name, expected", [
    ("res://", "a.gd", "res://a.gd"),
    ("res://scripts", "a.gd", "res://scripts/a.gd"),
    ("res://scripts/", "a.gd", "res://scripts/a.gd"),
])
def test_join_res_path(directory, name, expected):
    assert join_res_path(directory, name) == expected


def test_parent_res_path():
    assert parent_res_path("res://levels/boss/arena.gd") == "res://levels/boss"
