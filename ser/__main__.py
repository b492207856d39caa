"""Allow running ser as ``python -m ser``."""

from ser.cli.main import main

if __name__ == "__main__":
    main()
