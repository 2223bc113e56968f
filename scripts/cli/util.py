"""CLI utilities: banner, pause."""

from collections.abc import Callable

BANNER_WIDTH = 80


def print_banner() -> None:
    print("#" * BANNER_WIDTH)
    print("# PAYSLIP EXPLAINATOR")
    print("#" * BANNER_WIDTH)
    print()
    print("Welcome to the Payslip Explainator. Let's try decrypt your payslip.")
    print()


def pause(ask: Callable[[str], str]) -> None:
    """Block until the user presses enter."""
    ask("\n<<SCRIPT PAUSED. PRESS ENTER TO CONTINUE...>>")
