# A tool to compile and run a throwaway Python snippet inside the editor host.
# Author: AI Dock contributors
# Date: 2025-07-04
# Version: 0.1.0

import inspect
from pydantic import BaseModel, Field
from typing import Type
from .base_tool import BaseTool, ToolArgs
from aidock.models.scene import SceneObject
from aidock.services.editor_host import ScriptCompileError
from aidock.utils.logger import console

ENTRY_POINT = "run"


class RunScriptInput(BaseModel):
    code: str = Field(..., description="The full Python source. It must define 'def run():' taking no arguments.")

class RunScriptTool(BaseTool):
    """
    Executes a temporary script and returns what its run() function returns.
    Compile diagnostics are reported back so the model can fix its code.
    """
    name: str = "run_script"
    description: str = "Execute a temporary Python snippet immediately and return the result. " \
    "The snippet MUST define a 'def run():' function that takes no arguments and returns a value " \
    "(str, dict, or basic type). The editor host is available as the global 'editor', " \
    "e.g. editor.edited_scene_root(). Use this for calculations, deep scene inspection, or batch edits."
    args_schema: Type[BaseModel] = RunScriptInput

    def execute(self, args: ToolArgs) -> str:
        code = args["code"]
        console.info(f"Executing tool '{self.name}' ({len(code)} characters of source).")

        try:
            script = self.host.compile_script(code)
        except ScriptCompileError as e:
            if e.diagnostics:
                details = "\n".join(e.diagnostics)
                return f"Script Error ({e.kind}):\n{details}\n\nPlease check your code."
            return f"Script Syntax Error: {e.kind}. (No details captured). Please check your code."

        entry = script.namespace.get(ENTRY_POINT)
        if not callable(entry):
            return f"Error: The provided script does not define a 'def {ENTRY_POINT}():' function."
        required = [
            p for p in inspect.signature(entry).parameters.values()
            if p.default is p.empty and p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
        ]
        if required:
            return f"Error: '{ENTRY_POINT}()' must take no arguments, got {[p.name for p in required]}."

        try:
            result = entry()
        except (Exception, SystemExit) as e:
            console.warning(f"Script raised {type(e).__name__}: {e}")
            return f"Runtime Error executing script: {type(e).__name__}: {e}"

        if isinstance(result, SceneObject):
            output = f"[Object: {result.class_name} ID:{result.instance_id}]"
        else:
            output = str(result)
        if script.diagnostics:
            output += "\n\nCompile warnings:\n" + "\n".join(script.diagnostics)
        return output
