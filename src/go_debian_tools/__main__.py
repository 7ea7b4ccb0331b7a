"""Entry point for go-debian-tools command."""

import sys

from go_debian_tools.cli import main

if __name__ == "__main__":
    sys.exit(main())
