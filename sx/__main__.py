"""Entry point for running sx as a module: python -m sx"""

from sx.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
