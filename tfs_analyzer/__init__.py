"""Rule-based analyzer for The Forgotten Server Lua/XML scripts."""

__version__ = "0.1.0"

from tfs_analyzer.analyzer import InputError, analyze  # noqa: E402

__all__ = ["InputError", "__version__", "analyze"]
