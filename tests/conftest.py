"""Shared fixtures: a small project on disk, an edited scene and a scripted model."""

import json
from typing import Any, Dict, List, Optional

import pytest

from aidock.core.orchestrator import ChatOrchestrator, LoopOptions
from aidock.core.tool_executor import ToolExecutor
from aidock.core.tool_registry import ToolRegistry
from aidock.models.common import ChatCompletionEnvelope, Conversation
from aidock.models.scene import Node, PropertyUsage, Resource
from aidock.services.editor_host import ProjectHost
from aidock.services.llm_connector import TransportOptions
from aidock.services.transcript import TranscriptRecorder

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(32))


def text_response(content: str, usage: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "choices": [{"message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }
    if usage:
        body["usage"] = usage
    return body


def tool_call_response(*calls: Dict[str, Any], content: Optional[str] = None) -> Dict[str, Any]:
    """Each call is {"id", "name", "arguments": dict}."""
    return {
        "choices": [{
            "message": {
                "role": "assistant",
                "content": content,
                "tool_calls": [
                    {
                        "id": call["id"],
                        "type": "function",
                        "function": {"name": call["name"], "arguments": json.dumps(call.get("arguments", {}))},
                    }
                    for call in calls
                ],
            },
            "finish_reason": "tool_calls",
        }],
    }


class ScriptedTransport:
    """
    Returns canned response bodies in order. The last one repeats once the
    script runs out. Each request's messages are recorded as sent.
    """

    def __init__(self, responses: List[Dict[str, Any]], on_send=None):
        self.responses = list(responses)
        self.requests: List[List[Dict[str, Any]]] = []
        self.tools_sent: List[List[Dict[str, Any]]] = []
        self.on_send = on_send

    async def send(self, conversation: Conversation, tools, options) -> ChatCompletionEnvelope:
        self.requests.append(conversation.to_wire())
        self.tools_sent.append(tools)
        if self.on_send is not None:
            await self.on_send(len(self.requests))
        index = min(len(self.requests) - 1, len(self.responses) - 1)
        return ChatCompletionEnvelope.model_validate(self.responses[index])


@pytest.fixture
def project_dir(tmp_path):
    root = tmp_path / "project"
    (root / "scripts" / "enemies").mkdir(parents=True)
    (root / "scripts" / "player.gd").write_text("extends CharacterBody3D\n")
    (root / "scripts" / "enemies" / "Enemy_Goblin.gd").write_text("extends Node3D\n")
    (root / "icon.png").write_bytes(PNG_BYTES)
    (root / "README.md").write_text("# Demo project\n")
    return root


@pytest.fixture
def scene_root():
    main = Node("Main", "Node3D")
    player = main.add_child(Node("Player", "CharacterBody3D", scene_file_path="res://player.tscn"))
    player.set("position", "(0, 1, 0)")
    player.set("speed", 5.5, PropertyUsage.SCRIPT_VARIABLE)
    player.set("metadata/_edit_group_", True)
    player.set("_internal_cache", "hidden", PropertyUsage.INTERNAL)
    player.add_child(Node("Camera3D", "Camera3D"))

    material = Resource("StandardMaterial3D", "res://materials/skin.tres")
    material.set("albedo_color", "(1, 0, 0, 1)")
    mesh = Resource("ArrayMesh")
    mesh.set("material", material)
    body = player.add_child(Node("MeshInstance", "MeshInstance3D"))
    body.set("mesh", mesh)
    body.set("surface_material_override/0", material)
    body.set("notes", "x" * 300)

    main.add_child(Node("Enemy", "Node3D"))
    return main


@pytest.fixture
def host(project_dir, scene_root):
    return ProjectHost(project_dir, scene_root)


@pytest.fixture
def registry(host):
    return ToolRegistry(host)


@pytest.fixture
def executor(registry):
    return ToolExecutor(registry)


@pytest.fixture
def transport_options():
    return TransportOptions(endpoint="http://llm.test/v1/chat/completions", api_key="sk-test", model="test-model")


@pytest.fixture
def make_orchestrator(registry, transport_options):
    def factory(transport, max_round_trips: int = 10) -> ChatOrchestrator:
        return ChatOrchestrator(
            transport=transport,
            registry=registry,
            transport_options=lambda: transport_options,
            observer=TranscriptRecorder(),
            options=LoopOptions(max_round_trips=max_round_trips, tool_notice_delay=0),
        )
    return factory
