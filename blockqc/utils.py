"""
File:       blockqc/utils.py
Brief:      Utility functions.
"""
# Standard library imports
import datetime
import sys
import timeit
from functools import wraps
from typing import Callable, NoReturn

# Local modules imports
from blockqc.config import DEBUG, VERBOSE


def exit_program(msg: str) -> NoReturn:
    """Print message and exit program"""
    print(f"\n{msg}\nExiting program.", file=sys.stderr)
    sys.exit(1)


def report(msg: str) -> None:
    """Print a progress message"""
    if VERBOSE:
        print(msg, flush=True)


def format_elapsed(seconds: float) -> str:
    return f"{datetime.timedelta(seconds=seconds)} or {seconds:.3f} s"


def time_it(function: Callable) -> Callable:
    if not DEBUG:
        return function

    @wraps(function)
    def inner(*args, **kw):
        start = timeit.default_timer()
        result = function(*args, **kw)
        end = timeit.default_timer()
        diff = end - start
        print(f"\n\t*** TIMING: {function.__qualname__} took {format_elapsed(diff)} to complete.\n")
        return result
    return inner
