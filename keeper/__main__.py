"""Allow ``python -m keeper``."""

import sys

from .cli import main


sys.exit(main())
