import sys
from pathlib import Path

# Ensure local src and app directories are importable as package roots
root = Path(__file__).resolve().parents[1]
for sub in ('src', 'app'):
    path = root / sub
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
