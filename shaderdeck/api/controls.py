from abc import ABC, abstractmethod
from .utils import Uniform


class ControlGroup(ABC):
    """A named section of controls in a widget toolkit."""

    @abstractmethod
    def add_slider(self, name: str, get_value, min_value, max_value, on_change, help: str = "", integer=False):
        raise NotImplementedError

    @abstractmethod
    def add_color(self, name: str, get_value, on_change, help: str = ""):
        raise NotImplementedError


class Toolkit(ABC):
    """
    Creates control groups.

    Controls read the value they show through `get_value()` every time they
    are drawn and call `on_change(value)` when the user edits them.
    """

    @abstractmethod
    def group(self, title: str) -> ControlGroup:
        raise NotImplementedError


class ParameterControls:
    """
    Owns the live values of the parameters parsed from the shaders.

    Values start at each definition's default and change only through
    `set_value`, which the toolkit controls call on user input. The render
    loop reads them by calling `project_into` once per frame.
    """
    def __init__(self, definitions: dict, group: str = "Parameters"):
        self.definitions = dict(definitions)
        self.group = group
        self._values = {}
        self.reset()

    def reset(self):
        """Restores every parameter to its default value."""
        for name, definition in self.definitions.items():
            self._values[name] = self._coerce(definition, definition.default)

    @staticmethod
    def _coerce(definition, value):
        if definition.is_color:
            value = tuple(float(c) for c in value)
            if len(value) != 3:
                raise ValueError(f"Color parameter '{definition.name}' needs 3 components, got {len(value)}.")
            return value
        if definition.is_integer:
            return int(round(value))
        return float(value)

    @property
    def values(self) -> dict:
        return dict(self._values)

    def __getitem__(self, name):
        return self._values[name]

    def __contains__(self, name):
        return name in self._values

    def __len__(self):
        return len(self._values)

    def set_value(self, name: str, value):
        definition = self.definitions[name]
        self._values[name] = self._coerce(definition, value)

    def _getter(self, name):
        return lambda: self._values[name]

    def _setter(self, name):
        return lambda value: self.set_value(name, value)

    def build(self, toolkit: Toolkit) -> ControlGroup:
        """Adds one control per parameter to a single group of `toolkit`."""
        group = toolkit.group(self.group)
        for name, definition in self.definitions.items():
            if definition.is_color:
                group.add_color(name, self._getter(name), self._setter(name), help=definition.help)
            else:
                group.add_slider(
                    name, self._getter(name), definition.min_value, definition.max_value,
                    self._setter(name), help=definition.help, integer=definition.is_integer,
                )
        return group

    def project_into(self, uniforms: dict) -> dict:
        """Writes the current value of every parameter into `uniforms` (name -> Uniform)."""
        for name in self.definitions:
            uniform = uniforms.get(name)
            if uniform is None:
                uniform = uniforms[name] = Uniform()
            uniform.value = self._values[name]
        return uniforms

    def adopt_values(self, other: 'ParameterControls'):
        """Copies values from `other` for parameters whose definition did not change."""
        for name, definition in self.definitions.items():
            if other.definitions.get(name) == definition:
                self._values[name] = other[name]


class ImguiToolkit(Toolkit):
    """
    Toolkit backed by pyimgui.

    imgui redraws every frame, so controls are recorded here and drawn by
    `draw()` between `imgui.new_frame()` and `imgui.render()`.
    """
    def __init__(self, title: str = "Shader Parameters"):
        self.title = title
        self.groups = []

    def group(self, title: str) -> ControlGroup:
        group = ImguiControlGroup(title)
        self.groups.append(group)
        return group

    def clear(self):
        self.groups = []

    def draw(self):
        import imgui
        imgui.begin(self.title)
        for group in self.groups:
            group.draw(imgui)
        imgui.end()


class ImguiControlGroup(ControlGroup):
    def __init__(self, title: str):
        self.title = title
        self.controls = []

    def add_slider(self, name, get_value, min_value, max_value, on_change, help="", integer=False):
        self.controls.append({
            'kind': 'int' if integer else 'float', 'name': name, 'get_value': get_value,
            'min': min_value, 'max': max_value, 'on_change': on_change, 'help': help,
        })

    def add_color(self, name, get_value, on_change, help=""):
        self.controls.append({
            'kind': 'color', 'name': name, 'get_value': get_value,
            'on_change': on_change, 'help': help,
        })

    def draw(self, imgui):
        expanded, _ = imgui.collapsing_header(self.title, flags=imgui.TREE_NODE_DEFAULT_OPEN)
        if not expanded:
            return
        for control in self.controls:
            kind, name = control['kind'], control['name']
            current = control['get_value']()
            if kind == 'color':
                changed, value = imgui.color_edit3(name, *current)
                value = tuple(value)
            elif kind == 'int':
                changed, value = imgui.slider_int(name, current, int(control['min']), int(control['max']))
            else:
                changed, value = imgui.slider_float(name, current, control['min'], control['max'])
            if control['help'] and imgui.is_item_hovered():
                imgui.set_tooltip(control['help'])
            if changed:
                control['on_change'](value)
