from dataclasses import dataclass
from pathlib import Path


@dataclass
class SchemaTuiPaths:
    """Centralizes filesystem paths used by a schema-tui session."""

    home: Path

    @classmethod
    def default(cls) -> "SchemaTuiPaths":
        return cls(Path.home())

    @property
    def state_dir(self) -> Path:
        return self.home / ".schema-tui"

    @property
    def logs_dir(self) -> Path:
        return self.state_dir / "logs"
