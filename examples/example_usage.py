"""Example: drive the registry directly (no Flask).

Controllers are a thin layer; the check-in rules live in the Registry and its collaborators.
"""

import importlib

from config import get_settings_module

from event_checkin.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    registry = build_container(settings=settings).registry

    result = registry.scan("reg-003")
    print(result.status.value, result.record.name if result.record else "-")
    print(registry.stats().to_dict())


if __name__ == "__main__":
    main()
