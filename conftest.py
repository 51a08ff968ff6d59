import sys
from pathlib import Path

# Ensure 'src' is on sys.path before test collection so 'querydigest' imports
# resolve without an editable install.

ROOT_DIR = Path(__file__).parent.absolute()
src_dir = ROOT_DIR / "src"

if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))
