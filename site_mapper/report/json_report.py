# site_mapper/report/json_report.py

"""
Генерация JSON-отчёта для проекта SiteMapper.

Сериализация объекта SitesData в файл.
"""
import json
from pathlib import Path

from site_mapper.crawler.models import SitesData


def render_json(result: SitesData, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет результат обхода в формате JSON по указанному пути.

    :param result: объект SitesData с сайтами и ошибками
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 пробела
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_mapper.report.json_report import render_json
    report_path = render_json(result, 'reports/sitemap.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
