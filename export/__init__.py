"""Export-Modul: JSON, Excel (openpyxl) und Terminal-Darstellung."""

from export.json_export import export_json
from export.excel_export import ExcelExporter, generate_template

__all__ = ["export_json", "ExcelExporter", "generate_template"]
