from .api.utils import ShaderFetchError, MalformedAnnotationError, Uniform
from .api.io import FileFetcher, MemoryFetcher
from .api.loader import (
    IncludeResolver, ShaderPipeline, strip_version, find_included_names,
    load_shader_map, load_shaders
)
from .api.params import ParameterDefinition, parse_parameters
from .api.controls import ParameterControls, Toolkit, ControlGroup, ImguiToolkit
from .api.scene import Camera, ScreenPass, NativeRenderer, render
