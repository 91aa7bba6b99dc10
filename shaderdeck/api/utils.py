class ShaderFetchError(OSError):
    """Raised when a shader or include file cannot be retrieved."""
    def __init__(self, path: str, reason=None):
        self.path = path
        self.reason = reason
        message = f"Could not fetch shader source '{path}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MalformedAnnotationError(ValueError):
    """
    Raised when a comment directly above a uniform declaration does not
    follow the annotation grammar for the uniform's type.
    """
    def __init__(self, message: str, source=None, line=None, text=None):
        self.source = source
        self.line = line
        self.text = text
        location = source or "<shader>"
        if line is not None:
            location += f":{line}"
        super().__init__(f"{location}: {message}")


class Uniform:
    """A mutable `{value: ...}` holder read by the renderer every frame."""
    __slots__ = ('value',)

    def __init__(self, value=None):
        self.value = value

    def __repr__(self):
        return f"Uniform({self.value!r})"
