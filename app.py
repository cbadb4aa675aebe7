#!/usr/bin/env python3
"""
Moonshot Scanner - Application Entry Point.

============================================================
USAGE
============================================================
Direct execution:
    python app.py --source synthetic --top 10

Environment-based configuration (.env is loaded first):
    SCANNER_JOB_DATA_SOURCE=synthetic python app.py
    SCANNER_FETCH_API_KEY=<demo key> python app.py

Installed console script:
    moonshot-scanner --help

============================================================
"""

import sys

from orchestrator.cli import main


if __name__ == "__main__":
    sys.exit(main())
