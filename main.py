#!/usr/bin/env python3
"""HustleQuest — entry point.

Run with:
    python main.py status
    python -m hustlequest status
"""

import sys

from hustlequest.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
