"""Local persistence configuration."""

import os
from pathlib import Path

SAVE_KEY: str = "codeArchaeologyProgress"
DEFAULT_SAVE_DIR: Path = Path(
    os.environ.get("CODE_ARCHAEOLOGY_SAVE_DIR", Path.home() / ".code_archaeology")
)
ERA_DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data" / "eras"
