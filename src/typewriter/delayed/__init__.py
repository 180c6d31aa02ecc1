"""
delayed/ — typewriter-style deferred output

    from typewriter.delayed import Delayed, Properties

    d = Delayed(Properties(print_duration=timedelta(seconds=1)))
    d.write("hello\\n").do().result()
"""

from typewriter.delayed.convenience import do_wait, do_write, wait, write
from typewriter.delayed.delayed import DEFAULT_PROPERTIES, Delayed, Properties
from typewriter.delayed.graphemes import Graphemes, count_graphemes, split_graphemes
from typewriter.delayed.operation import Operation, WaitOperation, Writer, WriteOperation

__all__ = [
    "DEFAULT_PROPERTIES",
    "Delayed",
    "Properties",
    "Operation",
    "WaitOperation",
    "WriteOperation",
    "Writer",
    "Graphemes",
    "count_graphemes",
    "split_graphemes",
    "write",
    "wait",
    "do_write",
    "do_wait",
]
