import sys
from pathlib import Path


# Make ``punch_tracker`` importable from a source checkout without installing it.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
