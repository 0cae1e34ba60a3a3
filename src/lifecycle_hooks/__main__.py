"""
Entry point for running lifecycle_hooks as a module.

Allows running the lifecycle tools via:
    python -m lifecycle_hooks analyze app.services:PaymentService
    python -m lifecycle_hooks clear-cache
"""

import sys

from lifecycle_hooks.cli import main

if __name__ == "__main__":
    sys.exit(main())
