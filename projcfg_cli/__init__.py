"""Per-project build, run, debug and editor settings."""

from .project_config import ProjectConfigLoader, deep_merge, resolve_config
from .project_utils import find_project_root
from .version import __version__

__all__ = [
    "ProjectConfigLoader",
    "__version__",
    "deep_merge",
    "find_project_root",
    "resolve_config",
]
