"""Allow running the CLI with ``python -m lasraster``."""

import sys

from lasraster.cli import main

sys.exit(main())
