# repository/namespaces.py
from typing import Final

ROOT: Final[str] = "clausesense"

AUDIT: Final[str] = f"{ROOT}:audit"  # append-only list of handled queries
