"""
grove - Manage a bare Git clone and its linked worktrees
"""

from .__version__ import __version__
from .core import Grove
from .cli.main import main
from .services.git import discover, get_project_root, clear_discovery_cache

__all__ = ["Grove", "main", "discover", "get_project_root", "clear_discovery_cache", "__version__"]
