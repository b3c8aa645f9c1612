#!/usr/bin/env python3
"""
Entry point for the opening drill command line.

Usage:
    python run_drill.py list
    python run_drill.py drill <study-id>

See python run_drill.py --help for all options.
"""

from opening_drill.cli import main

if __name__ == "__main__":
    exit(main())
