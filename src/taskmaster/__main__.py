"""Allow ``python -m taskmaster``."""
import sys

from taskmaster.cli._dispatcher import main

if __name__ == "__main__":
    sys.exit(main())
