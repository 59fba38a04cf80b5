"""CSV export package."""

from expenseshub.export.csv_export import CSV_HEADERS, export_filename, generate_csv

__all__ = ["CSV_HEADERS", "export_filename", "generate_csv"]
