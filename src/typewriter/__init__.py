"""
typewriter — text output with a typewriter-like effect.

    from datetime import timedelta
    from typewriter import Delayed, Properties

    d = Delayed(Properties(print_duration=timedelta(seconds=1)))
    d.write("hello, world\n").do().result()
"""

from typewriter.delayed import DEFAULT_PROPERTIES, Delayed, Properties
from typewriter.exceptions import OperationCanceledError, TypewriterError

__all__ = [
    "DEFAULT_PROPERTIES",
    "Delayed",
    "Properties",
    "OperationCanceledError",
    "TypewriterError",
]
__version__ = "1.0.0"
