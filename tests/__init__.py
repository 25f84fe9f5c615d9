"""
File:       tests/__init__.py
Brief:      The "tests" directory init file.
"""
# Standard library imports
import os
import sys

# Local modules imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), r".."))
