# Ensure 'backend/' is on sys.path so 'import app.*' and 'import tests.*' work
# even when pytest rootdir is the repository root.
from pathlib import Path
import sys

_BACKEND_DIR = Path(__file__).resolve().parent  # <repo>/backend
if str(_BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(_BACKEND_DIR))
