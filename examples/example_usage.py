"""Example: use the service layer directly (no Flask).

Controllers are a thin layer; the rules live in the services.
"""

import importlib

from config import get_settings_module

from src.org_manager.org_manager.common.serialization import to_jsonable
from src.org_manager.org_manager.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    print(to_jsonable(container.asset_analytics_service.stats()))
    print(to_jsonable(container.settings_service.work_schedule()))


if __name__ == "__main__":
    main()
