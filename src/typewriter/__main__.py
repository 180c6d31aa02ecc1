"""Allow `python -m typewriter` to launch the CLI."""

import asyncio
import sys

from typewriter.main import main

sys.exit(asyncio.run(main()))
