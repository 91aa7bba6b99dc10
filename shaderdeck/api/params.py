import re
from .utils import MalformedAnnotationError

# Uniform types that are edited with a color picker instead of a slider.
COLOR_TYPES = {'vec3'}
INTEGER_TYPES = {'int', 'uint'}
# Uniform types edited with a slider.
SCALAR_TYPES = {'float', 'double'} | INTEGER_TYPES
# min/max carried by color parameters, which have no range.
COLOR_RANGE_PLACEHOLDER = 0.0

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"

# A `//` comment line immediately followed by `uniform <type> <name>;`.
ANNOTATED_UNIFORM_PATTERN = re.compile(
    r"^[ \t]*//[ \t]*(.*?)[ \t]*\r?\n[ \t]*uniform[ \t]+(\w+)[ \t]+(\w+)[ \t]*;",
    re.MULTILINE,
)
NUMERIC_ANNOTATION_PATTERN = re.compile(
    rf"^(.*?),\s*default\s+({_NUMBER})\s*,\s*({_NUMBER})\s*-\s*({_NUMBER})$"
)
COLOR_ANNOTATION_PATTERN = re.compile(
    rf"^(.*?),\s*default\s+\[\s*({_NUMBER})\s*,\s*({_NUMBER})\s*,\s*({_NUMBER})\s*\]$"
)


class ParameterDefinition:
    """
    A user-tunable uniform discovered in shader source.

    Numeric parameters carry an inclusive `min_value`/`max_value` range and
    a float `default`. Color parameters carry an RGB tuple as `default` and
    `COLOR_RANGE_PLACEHOLDER` for both range ends.

    Definitions are read-only once created.
    """
    __slots__ = ('name', 'glsl_type', 'help', 'default', 'min_value', 'max_value')

    def __init__(self, name: str, glsl_type: str, help: str, default,
                 min_value: float = COLOR_RANGE_PLACEHOLDER,
                 max_value: float = COLOR_RANGE_PLACEHOLDER):
        if glsl_type in COLOR_TYPES:
            default = tuple(float(c) for c in default)
        else:
            default = float(default)
        fields = dict(name=name, glsl_type=glsl_type, help=help, default=default,
                      min_value=float(min_value), max_value=float(max_value))
        for key, value in fields.items():
            object.__setattr__(self, key, value)

    def __setattr__(self, key, value):
        raise AttributeError(f"ParameterDefinition '{self.name}' is read-only")

    @property
    def is_color(self) -> bool:
        return self.glsl_type in COLOR_TYPES

    @property
    def is_integer(self) -> bool:
        return self.glsl_type in INTEGER_TYPES

    def to_dict(self) -> dict:
        return {key: getattr(self, key) for key in self.__slots__}

    def __eq__(self, other):
        if not isinstance(other, ParameterDefinition):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(tuple(self.to_dict().values()))

    def __repr__(self):
        if self.is_color:
            return f"ParameterDefinition({self.name!r}, {self.glsl_type!r}, default={self.default})"
        return (f"ParameterDefinition({self.name!r}, {self.glsl_type!r}, default={self.default}, "
                f"range=[{self.min_value}, {self.max_value}])")


def _parse_annotation(annotation: str, glsl_type: str, name: str) -> ParameterDefinition:
    """Builds a definition from the comment text above one uniform, or returns None."""
    if glsl_type in COLOR_TYPES:
        match = COLOR_ANNOTATION_PATTERN.match(annotation)
        if not match:
            return None
        help_text, r, g, b = match.groups()
        return ParameterDefinition(name, glsl_type, help_text.strip(), (r, g, b))

    match = NUMERIC_ANNOTATION_PATTERN.match(annotation)
    if not match:
        return None
    help_text, default, min_value, max_value = match.groups()
    return ParameterDefinition(name, glsl_type, help_text.strip(), default, min_value, max_value)


def parse_parameters(text: str, definitions: dict = None, source: str = None) -> dict:
    """
    Scans shader source for annotated uniforms.

    An annotation is a `//` comment on the line directly above a
    `uniform <type> <name>;` declaration:

        // Glow strength, default 0.5, 0 - 1
        uniform float glow;

        // Fog color, default [0.1, 0.2, 0.3]
        uniform vec3 fogColor;

    Uniforms without such a comment are ignored. A comment that does not
    follow the grammar for its uniform's type raises
    `MalformedAnnotationError` and nothing is added to `definitions`. So
    does an annotation on a uniform that is neither a scalar nor a `vec3`,
    or an `int`/`uint` annotation with fractional numbers.

    Args:
        text (str): Shader source, usually with includes already inlined.
        definitions (dict): Optional map to merge the results into. Later
            definitions replace earlier ones with the same name.
        source (str): Name used in error messages.

    Returns:
        dict: name -> ParameterDefinition, in source order.
    """
    found = {}
    for match in ANNOTATED_UNIFORM_PATTERN.finditer(text):
        annotation, glsl_type, name = match.groups()
        line = text.count("\n", 0, match.start()) + 1
        if glsl_type not in SCALAR_TYPES and glsl_type not in COLOR_TYPES:
            raise MalformedAnnotationError(
                f"uniform '{name}' of type '{glsl_type}' cannot be annotated; "
                f"use one of {', '.join(sorted(SCALAR_TYPES | COLOR_TYPES))}",
                source=source, line=line, text=annotation,
            )
        definition = _parse_annotation(annotation, glsl_type, name)
        if definition is None:
            if glsl_type in COLOR_TYPES:
                expected = "'<help>, default [<r>, <g>, <b>]'"
            else:
                expected = "'<help>, default <value>, <min> - <max>'"
            raise MalformedAnnotationError(
                f"annotation for uniform '{name}' must look like {expected}, got '// {annotation}'",
                source=source, line=line, text=annotation,
            )
        if definition.is_integer:
            fractional = [v for v in (definition.default, definition.min_value, definition.max_value)
                          if not v.is_integer()]
            if fractional:
                raise MalformedAnnotationError(
                    f"integer uniform '{name}' needs whole-number default and range, got {fractional[0]}",
                    source=source, line=line, text=annotation,
                )
        if not definition.is_color:
            if definition.min_value > definition.max_value:
                raise MalformedAnnotationError(
                    f"range of uniform '{name}' is empty ({definition.min_value} > {definition.max_value})",
                    source=source, line=line, text=annotation,
                )
            if not definition.min_value <= definition.default <= definition.max_value:
                raise MalformedAnnotationError(
                    f"default {definition.default} of uniform '{name}' lies outside "
                    f"[{definition.min_value}, {definition.max_value}]",
                    source=source, line=line, text=annotation,
                )
        # Same name later in the text wins.
        found.pop(name, None)
        found[name] = definition

    if definitions is None:
        return found
    for name, definition in found.items():
        definitions.pop(name, None)
        definitions[name] = definition
    return definitions
