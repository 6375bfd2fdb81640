"""Text output for analysis results."""

from bidmatch.output.report_generator import ReportGenerator

__all__ = [
    "ReportGenerator",
]
