"""Allow ``python -m initializr``."""

import sys

from .cli import main

sys.exit(main())
