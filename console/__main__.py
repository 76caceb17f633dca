"""Run the console game with ``python -m console``."""

import sys

from console.main import main

sys.exit(main())
