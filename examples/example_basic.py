from shaderdeck import render

def main():
    """
    Renders the packaged raymarching demo.

    The fragment shader pulls in `common.glsl` and `palette.glsl` through
    `#include <...>` directives. Every uniform annotated with a comment such as

        // Sphere radius, default 1, 0.1 - 3
        uniform float radius;

    shows up as a slider (or a color picker for `vec3`) in the
    "Parameters" panel. Edit any file in `shaderdeck/shaders` while the
    window is open and the shaders are reloaded, keeping the slider values
    of parameters you did not change. W and S move the camera.
    """
    render(watch=True)

if __name__ == "__main__":
    main()
