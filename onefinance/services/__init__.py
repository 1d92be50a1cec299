from .export import ExportFormat, ExportService
from .recap import RecapService, YearRecap

__all__ = [
    "ExportFormat",
    "ExportService",
    "RecapService",
    "YearRecap",
]
