"""Network configuration constants for the browser adapter."""

import os

DEFAULT_HOST: str = os.environ.get("CODE_ARCHAEOLOGY_HOST", "127.0.0.1")
DEFAULT_PORT: int = int(os.environ.get("CODE_ARCHAEOLOGY_PORT", "8000"))
