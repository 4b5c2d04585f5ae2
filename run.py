#!/usr/bin/env python3
"""Convenience runner for the travel report tool.

Usage:
    python run.py locations.csv --output report.xlsx
"""
import logging
import sys

from travel_report.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
