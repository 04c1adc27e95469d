"""Allow running as ``python -m scripts.doccov``."""

import sys

from scripts.doccov.cli import main

sys.exit(main())
