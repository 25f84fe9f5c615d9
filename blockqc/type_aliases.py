"""
File:       blockqc/type_aliases.py
Brief:      Type aliases for type annotations.
"""
from typing import Iterator, List, Optional, Tuple

from blockqc.record import Record

# Type aliases
Records = Iterator[Record]
RecordPairs = Iterator[Tuple[Record, Record]]
FilterResult = Optional[Record]
Routing = List[Tuple[str, Record]]
