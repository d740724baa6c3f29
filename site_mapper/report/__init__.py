"""site_mapper.report: Сохранение результатов обхода (JSON), используется CLI и тестами."""

from site_mapper.report.json_report import render_json

__all__ = ["render_json"]
