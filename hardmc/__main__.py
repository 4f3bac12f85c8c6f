"""Allow ``python -m hardmc``."""

import sys

from .cli import main

sys.exit(main())
