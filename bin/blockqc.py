#!/usr/bin/env python3
"""
File:       bin/blockqc.py
Brief:      The program's main "executable" file.
"""
# Standard library imports
import os
import sys

# Local modules imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), r".."))
from blockqc import main  # noqa


if __name__ == "__main__":
    """Program entry point"""
    main()
