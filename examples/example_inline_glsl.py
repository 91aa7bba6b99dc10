from shaderdeck import MemoryFetcher, NativeRenderer

VERTEX = """#version 330 core
in vec2 in_vert;
void main() { gl_Position = vec4(in_vert, 0.0, 1.0); }
"""

STRIPES = """
// Stripe count, default 12, 1 - 64
uniform float stripes;

// Stripe color, default [0.9, 0.3, 0.2]
uniform vec3 stripeColor;
"""

FRAGMENT = """#version 330 core
#include <stripes.glsl>
uniform vec2 resolution;
uniform float time;
out vec4 f_color;

void main() {
    vec2 uv = gl_FragCoord.xy / resolution;
    float band = step(0.5, fract(uv.x * stripes + time * 0.2));
    f_color = vec4(stripeColor * band, 1.0);
}
"""

def main():
    """
    Renders shaders kept in Python strings instead of files.

    `MemoryFetcher` serves the sources, including the `stripes.glsl` include.
    Hot reloading only works for shaders on disk, so it is off here.
    """
    fetcher = MemoryFetcher({
        "stripes.vert": VERTEX,
        "stripes.frag": FRAGMENT,
        "stripes.glsl": STRIPES,
    })
    renderer = NativeRenderer(
        {"vertex": "stripes.vert", "fragment": "stripes.frag"},
        fetcher=fetcher, group="Stripes",
    )
    renderer.run()

if __name__ == "__main__":
    main()
