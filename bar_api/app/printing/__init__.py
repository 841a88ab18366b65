"""Receipt rendering and delivery."""

from .dispatch import PrintDispatcher, PrintJob, PrintQueue, SocketPrinter
from .qz_signing import read_pem_from_env, sign_challenge
from .text import center_line, format_money, left_right_line, to_latin1_safe, wrap_text
from .ticket import PAPER_WIDTHS, build_ticket, paper_width

__all__ = [
    "PAPER_WIDTHS",
    "PrintDispatcher",
    "PrintJob",
    "PrintQueue",
    "SocketPrinter",
    "build_ticket",
    "center_line",
    "format_money",
    "left_right_line",
    "paper_width",
    "read_pem_from_env",
    "sign_challenge",
    "to_latin1_safe",
    "wrap_text",
]
