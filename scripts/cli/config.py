"""CLI configuration: default paths and the log file location."""

from pathlib import Path

# Project root (parent of scripts/)
ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_CONFIG_PATH = ROOT / "payslip_config.yml"

LOG_DIR = ROOT / "logs"
LOG_FILE_NAME = "explain_payslip.log"
