"""
Payslip Kernel

Exact-decimal value helpers, the immutable payslip input model, the typed
exception hierarchy and structured logging shared by every other package.
"""

__version__ = "1.3.0"
