"""Allow running as ``python -m torctl``."""

from torctl.cli.main import main

if __name__ == "__main__":
    main()
