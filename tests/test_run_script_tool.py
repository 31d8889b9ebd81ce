"""Tests for the run_script tool."""

import json
import textwrap


def run(executor, code):
    return executor.execute("run_script", json.dumps({"code": textwrap.dedent(code)}))


class TestRunScript:
    """Tests for compiling and running throwaway scripts."""

    def test_returns_stringified_result(self, executor):
        assert run(executor, """
            def run():
                return sum(range(5))
        """) == "10"

    def test_dict_result(self, executor):
        assert run(executor, """
            def run():
                return {"a": 1}
        """) == "{'a': 1}"

    def test_editor_global_gives_scene_access(self, executor):
        assert run(executor, """
            def run():
                root = editor.edited_scene_root()
                return ", ".join(child.name for child in root.get_children())
        """) == "Player, Enemy"

    def test_object_result_is_summarised(self, executor, scene_root):
        result = run(executor, """
            def run():
                return editor.edited_scene_root()
        """)
        assert result == f"[Object: Node3D ID:{scene_root.instance_id}]"

    def test_syntax_error_reports_line(self, executor):
        result = run(executor, """
            def run(:
                return 1
        """)
        assert result.startswith("Script Error (SyntaxError):\n[Line 2]:")
        assert result.endswith("Please check your code.")

    def test_missing_entry_point(self, executor):
        assert run(executor, "x = 1\n") == "Error: The provided script does not define a 'def run():' function."

    def test_entry_point_with_arguments(self, executor):
        result = run(executor, """
            def run(node):
                return node
        """)
        assert result.startswith("Error: 'run()' must take no arguments")

    def test_entry_point_with_defaults_is_accepted(self, executor):
        assert run(executor, """
            def run(times=2):
                return "ok" * times
        """) == "okok"

    def test_runtime_error(self, executor):
        result = run(executor, """
            def run():
                return 1 / 0
        """)
        assert result == "Runtime Error executing script: ZeroDivisionError: division by zero"

    def test_load_error_at_top_level(self, executor):
        result = run(executor, """
            import module_that_does_not_exist
            def run():
                return 1
        """)
        assert result.startswith("Script Error (LoadError):")
        assert "ModuleNotFoundError" in result

    def test_scripts_do_not_share_state(self, executor):
        run(executor, """
            counter = 41
            def run():
                return counter
        """)
        result = run(executor, """
            def run():
                return counter
        """)
        assert result.startswith("Runtime Error executing script: NameError")

    def test_system_exit_in_entry_point_is_reported(self, executor):
        result = run(executor, """
            def run():
                raise SystemExit(1)
        """)
        assert result == "Runtime Error executing script: SystemExit: 1"

    def test_system_exit_at_top_level_is_a_load_error(self, executor):
        result = run(executor, """
            import sys
            sys.exit(0)
        """)
        assert result.startswith("Script Error (LoadError):")
        assert "[Load]: SystemExit: 0" in result

    def test_compile_warnings_follow_the_result(self, executor):
        result = run(executor, """
            def run():
                return 1 is 1
        """)
        first, _, warnings_block = result.partition("\n\nCompile warnings:\n")
        assert first == "True"
        assert warnings_block.startswith("[Line 3]:")
