"""Allow ``python -m dirtail``."""

import sys

from .cli import main

sys.exit(main())
