"""Allow running xcallure as a module: python -m xcallure."""

from xcallure.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
