"""
Package entry point.

Allows running the application via:

    python -m tkbscan

This simply forwards execution to tkbscan.cli.main().
"""

from tkbscan.cli import main

if __name__ == "__main__":
    main()
