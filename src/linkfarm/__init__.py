"""Package-based symlink farm manager for dotfiles."""

__version__ = "0.1.0"
