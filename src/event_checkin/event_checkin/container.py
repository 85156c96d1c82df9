from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .common.datetime_utils import now_utc
from .core.constants import DEFAULT_STORE_KEY
from .database.bootstrap import ensure_kv_table
from .database.connection import DatabaseConnection, DBConfig
from .registry.service import Registry
from .reports.exporter import ExportService
from .storage.file_slot import FileStorageSlot
from .storage.mysql_slot import MySQLStorageSlot
from .storage.slot import StorageSlot


@dataclass(frozen=True)
class Container:
    slot: StorageSlot
    registry: Registry
    export_service: ExportService


def build_slot(settings: Any) -> StorageSlot:
    backend = str(getattr(settings, "STORE_BACKEND", "file")).lower()
    if backend == "file":
        return FileStorageSlot(Path(getattr(settings, "STORE_PATH", "data")))
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            ensure_kv_table(conn)
        return MySQLStorageSlot(conn)
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_container(*, settings: Any = None, slot: StorageSlot | None = None, **registry_options: Any) -> Container:
    """Wire one Registry for this process and load its state.

    ``slot`` overrides the backend chosen by ``settings`` (tests pass an in-memory one).
    """

    if slot is None:
        slot = build_slot(settings)
    store_key = str(getattr(settings, "STORE_KEY", DEFAULT_STORE_KEY))

    registry = Registry(slot, store_key=store_key, **registry_options)
    registry.load()

    return Container(
        slot=slot,
        registry=registry,
        export_service=ExportService(registry, clock=registry_options.get("clock", now_utc)),
    )

