"""Allow running recentlog with ``python -m recentlog``."""

import sys

from recentlog.cli.main import main

sys.exit(main())
