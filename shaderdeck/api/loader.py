import re
import sys
import asyncio
from .io import FileFetcher
from .params import parse_parameters

INCLUDE_PATTERN = re.compile(r"^#include <(.*)>$", re.MULTILINE)
# Editors want the pragma for syntax checking; the renderer adds its own.
VERSION_PATTERN = re.compile(r"^#version .*(?:\r?\n|$)", re.MULTILINE)


def strip_version(text: str) -> str:
    """Removes the first `#version` line, if there is one."""
    return VERSION_PATTERN.sub("", text, count=1)


def find_included_names(text: str) -> list:
    """Returns the distinct `#include <name>` targets of `text` in order of appearance."""
    return list(dict.fromkeys(INCLUDE_PATTERN.findall(text)))


class IncludeResolver:
    """
    Inlines `#include <name>` directives, fetching each name at most once.

    One resolver owns the include cache of one pipeline run. Only the
    directives found in the text given to `resolve` are collected; the
    inlined text is not scanned again, so includes nested inside included
    files are left as they are unless they name a file the outer text also
    includes.
    """
    def __init__(self, fetcher, cache: dict = None):
        self.fetcher = fetcher
        self.cache = cache if cache is not None else {}
        self._pending = {}

    async def _get(self, name: str) -> str:
        if name in self.cache:
            return self.cache[name]
        future = self._pending.get(name)
        if future is None:
            future = asyncio.ensure_future(self.fetcher.fetch(name))
            self._pending[name] = future
            try:
                self.cache[name] = await future
            finally:
                del self._pending[name]
            return self.cache[name]
        # Another shader is already fetching this include.
        return await asyncio.shield(future)

    async def resolve(self, text: str) -> str:
        for name in find_included_names(text):
            content = await self._get(name)
            directive = re.compile(rf"^#include <{re.escape(name)}>$", re.MULTILINE)
            text = directive.sub(lambda _: content, text)
        return text


class ShaderPipeline:
    """
    Turns a map of shader files into compiled sources and a parameter schema.

    Example:
        pipeline = ShaderPipeline(FileFetcher("assets/shaders"))
        shaders, parameters = await pipeline.run({
            "vertex": "screen.vert",
            "fragment": "screen.frag",
        })
    """
    def __init__(self, fetcher=None, verbose=False):
        self.fetcher = fetcher if fetcher is not None else FileFetcher()
        self.verbose = verbose

    async def _compile(self, resolver: IncludeResolver, path: str) -> str:
        text = await self.fetcher.fetch(path)
        return await resolver.resolve(strip_version(text))

    async def run(self, requests: dict):
        """
        Fetches and compiles every requested shader, then scans all of them
        for annotated uniforms.

        Args:
            requests (dict): Logical shader name -> path relative to the fetcher root.

        Returns:
            tuple: (shaders, parameters). `shaders` maps each logical name to
            its compiled source, `parameters` maps uniform names to
            ParameterDefinition objects. When two shaders annotate the same
            uniform, the one listed later wins.
        """
        resolver = IncludeResolver(self.fetcher)
        names = list(requests)
        tasks = [asyncio.ensure_future(self._compile(resolver, requests[name])) for name in names]
        try:
            sources = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        shaders = dict(zip(names, sources))
        parameters = {}
        for name, source in shaders.items():
            parse_parameters(source, parameters, source=requests[name])

        if self.verbose:
            print(f"INFO: Loaded {len(shaders)} shader(s), {len(parameters)} parameter(s), "
                  f"{len(resolver.cache)} include(s).")
        return shaders, parameters


async def load_shader_map(requests: dict, fetcher=None, verbose=False):
    """Coroutine form of `load_shaders`."""
    return await ShaderPipeline(fetcher, verbose=verbose).run(requests)


def load_shaders(requests: dict, root=None, fetcher=None, verbose=False):
    """
    Loads shaders synchronously. Must not be called from a running event loop.

    Args:
        requests (dict): Logical shader name -> file path.
        root: Directory the paths are relative to. Ignored when `fetcher` is given.
        fetcher: Object with an async `fetch(path)` method.
        verbose (bool): Print a summary line.
    """
    if fetcher is None:
        fetcher = FileFetcher(root)
    try:
        return asyncio.run(load_shader_map(requests, fetcher, verbose=verbose))
    except Exception as e:
        if verbose:
            print(f"ERROR: Shader pipeline failed: {e}", file=sys.stderr)
        raise
