#!/usr/bin/env python3
"""
Payslip Explainer.

Explains a monthly payslip line by line from a payslip_config.yml file.

Usage:
    python3 scripts/explain_payslip.py [-c PATH] [-p] [-n] [--variant NAME]
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from scripts.cli.main import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
