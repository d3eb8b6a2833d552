"""Entry point for running as module: python -m yieldramp"""

import sys

from yieldramp.cli import main

if __name__ == "__main__":
    sys.exit(main())
