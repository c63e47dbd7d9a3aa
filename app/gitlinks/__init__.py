"""gitlinks - manage git-sourced packages and their git dependencies."""

__version__ = "0.1.0"
