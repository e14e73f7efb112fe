"""Entry point for running the fake control server as a module.

Usage:
    python -m torctl.control.test_server
"""

from torctl.control.test_server.server import main

if __name__ == "__main__":
    main()
