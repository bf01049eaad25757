"""Runtime settings for a map session."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class EngineSettings(BaseModel):
    """Knobs that control traversal timing and persistence."""

    enter_node_delay: float = Field(default=1.0, ge=0.0)
    """Seconds between accepting a move and entering the node."""

    lock_after_selecting: bool = True
    """Lock the map surface while a node entry is in flight."""

    save_path: Path = Path("saves/map.json")
    """Where the current map is persisted."""

    progress_path: Path | None = None
    """Where the progression ledger is persisted.  None puts it beside
    ``save_path``."""

    seed: int | None = None
    """Fixed master seed.  None draws a fresh seed per session."""

    def ledger_path(self) -> Path:
        """Resolved location of the progression ledger."""
        if self.progress_path is not None:
            return self.progress_path
        return self.save_path.with_name(f"{self.save_path.stem}.progress.json")

    @classmethod
    def load(cls, path: str | Path) -> "EngineSettings":
        """Load settings from a JSON file."""
        return cls.model_validate_json(Path(path).read_text())

    def save(self, path: str | Path) -> None:
        """Write settings to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))
