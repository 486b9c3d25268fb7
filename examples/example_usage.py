"""Example: use the service layer directly (no Flask).

Controllers are a thin layer; the closure rules live in the services.
"""

import importlib

from config import get_settings_module

from src.school_system.school_system.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    preview = container.closure_service.preview("2024")
    print(preview.expected_phrase, preview.statistics.to_dict())
    for record in container.closure_service.history(limit=5):
        print(record.year, record.status.value, record.closed_by)


if __name__ == "__main__":
    main()
