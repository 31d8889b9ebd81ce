"""Tests for the project file tools."""

import base64
import json

from conftest import PNG_BYTES

from aidock.tools.file_system_tool import TEXT_FILE_LIMIT


def call(executor, name, **arguments):
    return executor.execute(name, json.dumps(arguments))


class TestListDirectory:
    """Tests for list_directory."""

    def test_lists_tagged_entries(self, executor):
        """Directories and files are tagged, one per line."""
        result = call(executor, "list_directory", path="res://scripts/")
        assert sorted(result.split("\n")) == ["[DIR] enemies", "[FILE] player.gd"]

    def test_lists_project_root(self, executor):
        lines = call(executor, "list_directory", path="res://").split("\n")
        assert "[DIR] scripts" in lines
        assert "[FILE] icon.png" in lines
        assert "[FILE] README.md" in lines

    def test_missing_directory_is_error_text(self, executor):
        result = call(executor, "list_directory", path="res://nope/")
        assert result.startswith("Error: Could not open directory res://nope/.")

    def test_path_outside_project_is_refused(self, executor):
        result = call(executor, "list_directory", path="res://../")
        assert result.startswith("Error: Could not open directory")
        assert "outside the project" in result


class TestReadFile:
    """Tests for read_file, including the 10KB text boundary."""

    def test_reads_text_file(self, executor):
        assert call(executor, "read_file", path="res://scripts/player.gd") == "extends CharacterBody3D\n"

    def test_missing_file(self, executor):
        assert call(executor, "read_file", path="res://missing.gd") == "Error: File not found."

    def test_file_at_limit_is_returned(self, executor, project_dir):
        """A text file of exactly 10240 bytes is read."""
        (project_dir / "exact.txt").write_bytes(b"a" * TEXT_FILE_LIMIT)
        result = call(executor, "read_file", path="res://exact.txt")
        assert len(result) == 10240

    def test_file_one_byte_over_limit_fails(self, executor, project_dir):
        (project_dir / "big.txt").write_bytes(b"a" * (TEXT_FILE_LIMIT + 1))
        result = call(executor, "read_file", path="res://big.txt")
        assert result == "Error: File is too large (10241 bytes). Text file limit is 10KB."

    def test_image_returns_data_uri(self, executor):
        result = call(executor, "read_file", path="res://icon.png")
        assert result.startswith("data:image/png;base64,")
        assert base64.b64decode(result.split(",", 1)[1]) == PNG_BYTES

    def test_large_image_bypasses_size_check(self, executor, project_dir):
        (project_dir / "big.PNG").write_bytes(b"\x00" * (TEXT_FILE_LIMIT * 3))
        assert call(executor, "read_file", path="res://big.PNG").startswith("data:image/png;base64,")

    def test_image_mime_aliases(self, executor, project_dir):
        (project_dir / "logo.svg").write_text("<svg/>")
        (project_dir / "photo.jpg").write_bytes(b"\xff\xd8\xff")
        assert call(executor, "read_file", path="res://logo.svg").startswith("data:image/svg+xml;base64,")
        assert call(executor, "read_file", path="res://photo.jpg").startswith("data:image/jpeg;base64,")

    def test_accepts_relative_path(self, executor):
        assert call(executor, "read_file", path="README.md") == "# Demo project\n"


class TestSearchFiles:
    """Tests for search_files."""

    def test_case_insensitive_recursive_match(self, executor):
        result = call(executor, "search_files", keyword="goblin")
        assert result == "res://scripts/enemies/Enemy_Goblin.gd"

    def test_multiple_matches_one_per_line(self, executor):
        result = call(executor, "search_files", keyword=".gd")
        assert sorted(result.split("\n")) == [
            "res://scripts/enemies/Enemy_Goblin.gd",
            "res://scripts/player.gd",
        ]

    def test_no_match_is_empty_string(self, executor):
        assert call(executor, "search_files", keyword="dragon") == ""


class TestCreateFile:
    """Tests for create_file."""

    def test_creates_parent_directories(self, executor, host, project_dir):
        result = call(executor, "create_file", path="res://levels/boss/arena.gd", content="extends Node\n")
        assert result == "Success: File created/overwritten at 'res://levels/boss/arena.gd'."
        assert (project_dir / "levels" / "boss" / "arena.gd").read_text() == "extends Node\n"
        assert "res://levels/boss/arena.gd" in host.indexed_files

    def test_overwrites_existing_file(self, executor, project_dir):
        call(executor, "create_file", path="res://README.md", content="new")
        assert (project_dir / "README.md").read_text() == "new"

    def test_missing_content_writes_empty_file(self, executor, project_dir):
        """Missing parameters default to an empty string."""
        call(executor, "create_file", path="res://empty.txt")
        assert (project_dir / "empty.txt").read_text() == ""

    def test_refuses_path_outside_project(self, executor, project_dir):
        result = call(executor, "create_file", path="res://../escape.txt", content="x")
        assert result.startswith("Error")
        assert not (project_dir.parent / "escape.txt").exists()
