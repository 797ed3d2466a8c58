"""Allow ``python -m src.cli`` as a shortcut for the planner."""

import sys

from src.cli.plan import main

sys.exit(main())
