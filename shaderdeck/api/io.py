import os
import asyncio
from pathlib import Path
from .utils import ShaderFetchError

SHADER_ROOT = Path(os.environ.get(
    "SHADERDECK_SHADER_ROOT", Path(__file__).parent.parent / 'shaders'
))

class FileFetcher:
    """Reads shader sources from disk, relative to a fixed root directory."""
    def __init__(self, root=None, encoding='utf-8'):
        self.root = Path(root) if root is not None else SHADER_ROOT
        self.encoding = encoding

    def _read(self, path: str) -> str:
        try:
            with open(self.root / path, 'r', encoding=self.encoding) as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ShaderFetchError(path, e) from e

    async def fetch(self, path: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read, path)

class MemoryFetcher:
    """
    Serves shader sources from a dictionary.

    Every request is recorded in `requests`, which makes it handy for
    inline shaders and for checking how often a path was fetched.
    """
    def __init__(self, sources: dict):
        self.sources = dict(sources)
        self.requests = []

    def count(self, path: str) -> int:
        return self.requests.count(path)

    async def fetch(self, path: str) -> str:
        self.requests.append(path)
        # Yield once so concurrent callers interleave like real I/O.
        await asyncio.sleep(0)
        if path not in self.sources:
            raise ShaderFetchError(path, "not found")
        return self.sources[path]
