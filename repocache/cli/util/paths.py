"""Manages repocache directories following the XDG Base Directory spec.

Directory layout:
    ~/.config/repocache/
        config.yaml         # User configuration

    ~/.local/share/repocache/
        repocache.db        # SQLite snapshot store
"""

import os
from pathlib import Path


class RepoCachePaths:
    """Resolves repocache paths.

    ``REPOCACHE_DATA_DIR`` overrides the data directory; individual directories
    can also be overridden for testing.
    """

    def __init__(
        self,
        *,
        config_dir: Path | None = None,
        data_dir: Path | None = None,
    ) -> None:
        home = Path.home()
        env_data_dir = os.environ.get("REPOCACHE_DATA_DIR")
        self._config_dir = config_dir or home / ".config" / "repocache"
        self._data_dir = data_dir or (
            Path(env_data_dir).expanduser()
            if env_data_dir
            else home / ".local" / "share" / "repocache"
        )

    @property
    def config_dir(self) -> Path:
        """Config directory (~/.config/repocache)."""
        return self._config_dir

    @property
    def data_dir(self) -> Path:
        """Data directory (~/.local/share/repocache)."""
        return self._data_dir

    @property
    def config_file(self) -> Path:
        """Main config file."""
        return self._config_dir / "config.yaml"

    @property
    def database_file(self) -> Path:
        """SQLite database file."""
        return self._data_dir / "repocache.db"
