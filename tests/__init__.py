"""Test suite for the parking ledger"""

import sys
from pathlib import Path

# Make the src layout importable without installing the package
SRC_DIR = str(Path(__file__).resolve().parent.parent / "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)
