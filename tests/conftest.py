import asyncio
import pytest
from shaderdeck import MemoryFetcher
from shaderdeck.api.controls import Toolkit, ControlGroup


class RecordingGroup(ControlGroup):
    def __init__(self, title):
        self.title = title
        self.controls = {}

    def add_slider(self, name, get_value, min_value, max_value, on_change, help="", integer=False):
        self.controls[name] = {'kind': 'slider', 'get_value': get_value, 'min': min_value, 'max': max_value,
                               'on_change': on_change, 'help': help, 'integer': integer}

    def add_color(self, name, get_value, on_change, help=""):
        self.controls[name] = {'kind': 'color', 'get_value': get_value, 'on_change': on_change, 'help': help}


class RecordingToolkit(Toolkit):
    def __init__(self):
        self.groups = []

    def group(self, title):
        group = RecordingGroup(title)
        self.groups.append(group)
        return group


@pytest.fixture
def toolkit():
    return RecordingToolkit()


@pytest.fixture
def run():
    """Runs a coroutine to completion."""
    return asyncio.run


@pytest.fixture
def sources():
    return {
        "screen.vert": "#version 330 core\nin vec2 in_vert;\nvoid main() { gl_Position = vec4(in_vert, 0.0, 1.0); }\n",
        "screen.frag": (
            "#version 330 core\n"
            "#include <common.glsl>\n"
            "// Sphere radius, default 1, 0.1 - 3\n"
            "uniform float radius;\n"
            "out vec4 f_color;\n"
            "void main() { f_color = vec4(tint * radius, 1.0); }\n"
        ),
        "common.glsl": (
            "// Surface tint, default [1, 0.5, 0]\n"
            "uniform vec3 tint;\n"
        ),
    }


@pytest.fixture
def fetcher(sources):
    return MemoryFetcher(sources)
