"""
Swap run reports on top of swapflow-core.

Turns SwapResult status history and lifecycle events into DataFrames and a
printed summary.
"""

from reporting.swap_report import event_frame, print_report, status_history_frame

__all__ = [
    "event_frame",
    "print_report",
    "status_history_frame",
]
