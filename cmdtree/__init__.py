__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'cmdtree'
__author__ = 'cmdtree contributors'
__license__ = 'MIT'
__version__ = "0.1.0"

from .options import *
from .commands import *
from .faults import *
from .engine import *
from .logs import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Keep in step with __version__ and pyproject.toml.
version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Public API of each submodule, in import order.
__all__ += (
    options.__all__  # type: ignore[attr-defined]
    + commands.__all__  # type: ignore[attr-defined]
    + faults.__all__  # type: ignore[attr-defined]
    + engine.__all__  # type: ignore[attr-defined]
    + logs.__all__  # type: ignore[attr-defined]
)
