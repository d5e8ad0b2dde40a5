#!/usr/bin/env python3
"""
Metamorphic slicer test entry point

Usage:
    python metamorph.py --count 20 --seed 7 --kinds deadcode rename
    python metamorph.py --input-dir baselines/ --output-dir out/ -v
"""

import sys

from driver.main import main

if __name__ == "__main__":
    sys.exit(main())
