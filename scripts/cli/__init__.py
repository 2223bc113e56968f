"""
Payslip Explainer CLI -- walks through a payslip figure by figure.

Loads the personal payslip_config.yml, asks for this month's variable
amounts, runs the payslip pipeline and prints each section of the
explanation.

Entry point: scripts/explain_payslip.py or python -m scripts.cli
"""

from scripts.cli.main import main

__all__ = ["main"]
