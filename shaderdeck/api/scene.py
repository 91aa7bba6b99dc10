import sys
import numpy as np
from pathlib import Path
from .io import FileFetcher, SHADER_ROOT
from .loader import load_shaders
from .controls import ParameterControls, ImguiToolkit
from .utils import Uniform

try:
    from watchdog.observers import Observer
    from watchdog.events import FileSystemEventHandler
    WATCHDOG_AVAILABLE = True
except ImportError:
    WATCHDOG_AVAILABLE = False

# Shader files carry their own #version for editors; it is stripped on load
# and this one is prepended before compiling.
GLSL_VERSION = "#version 330 core\n"
DEFAULT_SHADERS = {
    'vertex': "screen.vert",
    'fragment': "screen.frag",
}
# GLFW key code -> camera z offset
KEY_BINDINGS = {
    83: 50.0,   # S
    87: -50.0,  # W
}
BACKGROUND = (0.0, 0.0, 0.0)

class Camera:
    """Perspective camera looking from `position` towards `target`."""
    def __init__(self, position=(0, 0, 5), target=(0, 0, 0), fov=50.0, near=0.1, far=10000.0):
        self.position = np.array(position, dtype=float)
        self.target = np.array(target, dtype=float)
        self.up = np.array([0.0, 1.0, 0.0])
        self.fov = fov
        self.near = near
        self.far = far

    def dolly(self, dz: float):
        self.position[2] += dz

    def world_matrix(self) -> np.ndarray:
        """Camera-to-world transform."""
        z = self.position - self.target
        if np.linalg.norm(z) == 0: raise ValueError("Camera position and target coincide.")
        z = z / np.linalg.norm(z)
        x = np.cross(self.up, z)
        if np.linalg.norm(x) == 0: x = np.array([1.0, 0.0, 0.0])
        x = x / np.linalg.norm(x)
        y = np.cross(z, x)
        m = np.identity(4)
        m[:3, 0], m[:3, 1], m[:3, 2], m[:3, 3] = x, y, z, self.position
        return m

    def projection_matrix(self, aspect: float) -> np.ndarray:
        f = 1.0 / np.tan(np.radians(self.fov) / 2.0)
        n, fa = self.near, self.far
        return np.array([
            [f / aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (fa + n) / (n - fa), 2.0 * fa * n / (n - fa)],
            [0.0, 0.0, -1.0, 0.0],
        ])

    def projection_matrix_inverse(self, aspect: float) -> np.ndarray:
        return np.linalg.inv(self.projection_matrix(aspect))

class ScreenPass:
    """
    Draws a fullscreen quad with the given shaders.

    Also owns a float RGBA render target with a depth attachment, exposed
    to the fragment shader as the `buffer` sampler.
    """
    def __init__(self, ctx, vertex_shader: str, fragment_shader: str, uniforms: dict = None, size=(1280, 720)):
        self.ctx = ctx
        self.size = tuple(size)
        self.buffer = ctx.texture(self.size, 4, dtype='f4')
        self.depth = ctx.depth_texture(self.size)
        self.framebuffer = ctx.framebuffer(color_attachments=[self.buffer], depth_attachment=self.depth)
        self.uniforms = {'buffer': Uniform(self.buffer)}
        self.uniforms.update(uniforms or {})

        self.program = ctx.program(
            vertex_shader=GLSL_VERSION + vertex_shader,
            fragment_shader=GLSL_VERSION + fragment_shader,
        )
        vertices = np.array([-1.0, -1.0, -1.0, 1.0, 1.0, -1.0, 1.0, 1.0], dtype='f4')
        self.vbo = ctx.buffer(vertices)
        self.vao = ctx.simple_vertex_array(self.program, self.vbo, 'in_vert')

    def apply_uniforms(self):
        """Uploads every uniform the program declares; others are skipped."""
        unit = 0
        for name, uniform in self.uniforms.items():
            try: member = self.program[name]
            except KeyError: continue
            value = uniform.value
            if hasattr(value, 'use'):
                value.use(location=unit)
                member.value = unit
                unit += 1
            elif isinstance(value, np.ndarray) and value.ndim == 2:
                # GLSL matrices are column-major.
                member.write(value.astype('f4').tobytes(order='F'))
            elif isinstance(value, np.ndarray):
                member.value = tuple(float(v) for v in value)
            else:
                member.value = value

    def render(self):
        import moderngl
        self.apply_uniforms()
        self.vao.render(mode=moderngl.TRIANGLE_STRIP)

    def release(self):
        for resource in (self.vao, self.vbo, self.program, self.framebuffer, self.depth, self.buffer):
            resource.release()

class NativeRenderer:
    """
    Window renderer using GLFW, ModernGL and pyimgui.

    Loads the shaders once before the first frame, shows a slider or color
    picker for every annotated uniform, and pushes the current values into
    the screen pass every frame.
    """
    def __init__(self, shaders: dict = None, root=None, fetcher=None, camera: Camera = None,
                 width=1280, height=720, watch=True, group="Parameters"):
        self.shaders = dict(shaders or DEFAULT_SHADERS)
        self.root = Path(root) if root is not None else SHADER_ROOT
        self.fetcher = fetcher if fetcher is not None else FileFetcher(self.root)
        self.camera = camera if camera else Camera()
        self.width = width
        self.height = height
        self.group = group
        # Only files on disk can be watched.
        self.watching = watch and WATCHDOG_AVAILABLE and isinstance(self.fetcher, FileFetcher)

        self.window = None
        self.ctx = None
        self.gui = None
        self.screen = None
        self.controls = None
        self.toolkit = ImguiToolkit()
        self.reload_pending = False

    def load_assets(self):
        return load_shaders(self.shaders, fetcher=self.fetcher, verbose=True)

    def _camera_uniforms(self):
        return {
            'cameraMatrix': Uniform(),
            'worldMatrix': Uniform(),
            'realCameraPosition': Uniform(),
            'resolution': Uniform((float(self.width), float(self.height))),
            'time': Uniform(0.0),
        }

    def _apply_assets(self, shaders: dict, parameters: dict) -> bool:
        """Swaps in freshly loaded shaders. Returns False if they fail to compile."""
        try:
            screen = ScreenPass(self.ctx, shaders['vertex'], shaders['fragment'],
                                uniforms=self._camera_uniforms(), size=(self.width, self.height))
        except Exception as e:
            print(f"ERROR: Shader compilation failed. Details:\n{e}", file=sys.stderr)
            return False
        if self.screen is not None:
            self.screen.release()
        self.screen = screen

        controls = ParameterControls(parameters, group=self.group)
        if self.controls is not None:
            controls.adopt_values(self.controls)
        self.controls = controls
        self.toolkit.clear()
        self.controls.build(self.toolkit)
        return True

    def update_frame(self, width: int, height: int, time: float):
        """Refreshes camera and parameter uniforms for the next frame."""
        uniforms = self.screen.uniforms
        aspect = width / height if height else 1.0
        uniforms['cameraMatrix'].value = self.camera.projection_matrix_inverse(aspect)
        uniforms['worldMatrix'].value = self.camera.world_matrix()
        uniforms['realCameraPosition'].value = self.camera.position
        uniforms['resolution'].value = (float(width), float(height))
        uniforms['time'].value = float(time)
        self.controls.project_into(uniforms)

    def handle_key(self, key: int):
        if key in KEY_BINDINGS:
            self.camera.dolly(KEY_BINDINGS[key])

    def _on_key(self, window, key, scancode, action, mods):
        import glfw
        import imgui
        self.gui.keyboard_callback(window, key, scancode, action, mods)
        if action == glfw.PRESS and not imgui.get_io().want_capture_keyboard:
            self.handle_key(key)

    def _init_context(self):
        import glfw
        import moderngl
        import imgui
        from imgui.integrations.glfw import GlfwRenderer
        if not glfw.init(): raise RuntimeError("Could not initialize GLFW")

        glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, 3)
        glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, 3)
        glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)
        glfw.window_hint(glfw.OPENGL_FORWARD_COMPAT, True)

        self.window = glfw.create_window(self.width, self.height, "Shader Deck", None, None)
        if not self.window: glfw.terminate(); raise RuntimeError("Could not create GLFW window.")

        glfw.make_context_current(self.window)
        self.ctx = moderngl.create_context()
        imgui.create_context()
        self.gui = GlfwRenderer(self.window)
        glfw.set_key_callback(self.window, self._on_key)

    def run(self):
        import glfw
        import imgui
        # Assets must be complete before the first frame.
        shaders, parameters = self.load_assets()
        self._init_context()
        if not self._apply_assets(shaders, parameters):
            glfw.terminate(); return

        self._start_watcher()

        while not glfw.window_should_close(self.window):
            if self.reload_pending: self.reload_pending = False; self._reload()

            glfw.poll_events()
            self.gui.process_inputs()
            imgui.new_frame()
            self.toolkit.draw()

            width, height = glfw.get_framebuffer_size(self.window)
            self.ctx.viewport = (0, 0, width, height)
            self.update_frame(width, height, glfw.get_time())

            self.ctx.screen.use()
            self.ctx.clear(*BACKGROUND)
            self.screen.render()

            imgui.render()
            self.gui.render(imgui.get_draw_data())
            glfw.swap_buffers(self.window)

        self.gui.shutdown()
        glfw.terminate()

    def _start_watcher(self):
        if not self.watching:
            if not WATCHDOG_AVAILABLE:
                print("INFO: Hot-reloading disabled. `watchdog` not installed. Run 'pip install watchdog'.")
            return
        class ChangeHandler(FileSystemEventHandler):
            def __init__(self, renderer): self.renderer = renderer
            def on_modified(self, event):
                if not event.is_directory: self.renderer.reload_pending = True
        observer = Observer()
        observer.schedule(ChangeHandler(self), str(self.fetcher.root), recursive=True)
        observer.daemon = True
        observer.start()
        print(f"INFO: Watching '{self.fetcher.root}' for changes...")

    def _reload(self):
        print("INFO: Reloading shaders...")
        try:
            shaders, parameters = self.load_assets()
        except Exception as e:
            print(f"ERROR: Reload failed: {e}", file=sys.stderr)
            return
        self._apply_assets(shaders, parameters)

def render(shaders: dict = None, root=None, watch=True, **kwargs):
    """
    Main entry point. Loads the shaders, opens a window and renders them
    until it is closed.

    Args:
        shaders (dict): Logical name -> file, needs 'vertex' and 'fragment'.
            Defaults to the packaged demo shaders.
        root: Directory containing the shader files.
        watch (bool): Reload when files under `root` change.
    """
    try:
        import moderngl, glfw, imgui
    except ImportError:
        print("ERROR: Live rendering requires 'moderngl', 'glfw' and 'imgui'.", file=sys.stderr)
        return
    renderer = NativeRenderer(shaders, root=root, watch=watch, **kwargs)
    renderer.run()
