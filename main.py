from __future__ import annotations

import sys
from pathlib import Path

# Run from a checkout without installing: put src/ on the import path
SRC_DIR = Path(__file__).resolve().parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from ddiscan.gui.application import main

if __name__ == "__main__":
    main(list(sys.argv))
