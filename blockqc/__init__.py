"""
File:       blockqc/__init__.py
Brief:      The "blockqc" package init file.
"""
__version__ = "0.1.0"


def main() -> None:
    """Second-level program entry point"""
    from blockqc.__main__ import main as _main
    return _main()
