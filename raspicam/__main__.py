"""Allow ``python -m raspicam`` to run the command-line tool."""

from __future__ import annotations

import sys

from raspicam.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
