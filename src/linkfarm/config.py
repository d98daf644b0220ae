"""User configuration for linkfarm."""

import tomllib
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from pathlib import Path
from typing import Self

from platformdirs import user_config_path

from linkfarm.exceptions import ConfigValidationError

DEFAULT_STOW_DIR = Path("~/.dotfiles")


@dataclass(frozen=True)
class Settings:
    """Where packages live, where they are linked, and what to skip."""

    stow_dir: Path = DEFAULT_STOW_DIR
    target: Path = Path("~")
    ignore: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def default_path(cls) -> Path:
        """Get default config file location using platformdirs."""
        return user_config_path("linkfarm") / "config.toml"

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create from dict loaded from TOML."""
        unknown = set(data) - {"stow_dir", "target", "ignore"}
        if unknown:
            raise ConfigValidationError(
                f"Unknown config keys: {', '.join(sorted(unknown))}"
            )

        settings = cls()
        for key in ("stow_dir", "target"):
            if key in data:
                if not isinstance(data[key], str):
                    raise ConfigValidationError(f"'{key}' must be a string")
                settings = replace(settings, **{key: Path(data[key])})

        if "ignore" in data:
            ignore = data["ignore"]
            if not isinstance(ignore, list) or not all(
                isinstance(p, str) for p in ignore
            ):
                raise ConfigValidationError("'ignore' must be a list of strings")
            settings = replace(settings, ignore=tuple(ignore))

        return settings

    @classmethod
    def load(cls, path: Path | None = None) -> Self:
        """Load settings from a TOML file.

        Args:
            path: Path to config file. If None, uses default location and
                returns defaults when there is no file there.

        Raises:
            ConfigValidationError: If the file is invalid, or if an explicit
                path does not exist
        """
        if path is None:
            path = cls.default_path()
            if not path.exists():
                return cls()
        elif not path.is_file():
            raise ConfigValidationError(f"Config file does not exist: {path}")

        try:
            data = tomllib.loads(path.read_text())
        except tomllib.TOMLDecodeError as e:
            raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e
        return cls.from_dict(data)

    def override(self, stow_dir: Path | None = None, target: Path | None = None) -> Self:
        """Apply command-line (or environment) values on top of the file."""
        settings = self
        if stow_dir is not None:
            settings = replace(settings, stow_dir=stow_dir)
        if target is not None:
            settings = replace(settings, target=target)
        return settings

    @property
    def stow_path(self) -> Path:
        return self.stow_dir.expanduser()

    @property
    def target_path(self) -> Path:
        return self.target.expanduser()
