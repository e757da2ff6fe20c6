"""IlliniHunt: project showcase with trending ranking."""

from illinihunt.version import __version__

__all__ = ["__version__"]
