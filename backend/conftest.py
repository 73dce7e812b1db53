# Ensure 'backend/' is on sys.path so 'import expertbook' and 'import tests.*'
# work without an editable install.
from pathlib import Path
import sys

_BACKEND_ROOT = Path(__file__).resolve().parent
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

# The seed CLI is exercised through tests/unit/scripts; nothing under scripts/ is a test module
collect_ignore_glob = ["scripts/*.py"]
