from fleetscore.reporting.colors import number_colors, string_colors
from fleetscore.reporting.report_writer import ReportWriter

__all__ = ["ReportWriter", "number_colors", "string_colors"]
