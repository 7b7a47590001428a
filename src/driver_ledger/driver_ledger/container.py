from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.constants import DEFAULT_DEDUP_MAX_ENTRIES, DEFAULT_DEDUP_TTL_SECONDS, DEFAULT_LANGUAGE
from .core.enums import NameMatchPolicy
from .ledger.approval import ApprovalStateMachine
from .ledger.locator import RecordLocator
from .ledger.locks import KeyedLocks
from .ledger.schema import SchemaDetector, SchemaRegistry
from .ledger.segments import SegmentProvisioner
from .ledger.service import LedgerService
from .ledger.writer import LedgerWriter
from .notifications.dedup_cache import TTLDedupCache
from .notifications.notifier import LoggingSink, MessageSink, Notifier
from .overtime.calculator.standard_calculator import StandardOvertimeCalculator
from .sheets.connection import DEFAULT_SCOPES, SheetsConfig, SheetsConnection
from .sheets.google_sheets_store import GoogleSheetsStore
from .sheets.memory_store import InMemorySheetStore
from .sheets.store import SheetStore

STORE_BACKENDS = ("google", "memory")


@dataclass(frozen=True)
class Container:
    store: SheetStore
    store_backend: str

    schemas: SchemaRegistry
    locator: RecordLocator
    writer: LedgerWriter
    approvals: ApprovalStateMachine
    provisioner: SegmentProvisioner
    notifier: Notifier

    ledger_service: LedgerService


def _build_store(store_backend: str, sheets_config: Optional[dict]) -> SheetStore:
    if store_backend == "memory":
        return InMemorySheetStore()
    if store_backend != "google":
        raise ValueError(f"Unknown STORE_BACKEND {store_backend!r}; expected one of {STORE_BACKENDS}")

    sheets_config = sheets_config or {}
    if not sheets_config.get("spreadsheet_id"):
        raise ValueError("SHEETS_CONFIG.spreadsheet_id is required for the google backend")
    config = SheetsConfig(
        spreadsheet_id=str(sheets_config["spreadsheet_id"]),
        credentials_file=sheets_config.get("credentials_file") or None,
        credentials_b64=sheets_config.get("credentials_b64") or None,
        scopes=tuple(sheets_config.get("scopes") or DEFAULT_SCOPES),
    )
    return GoogleSheetsStore(SheetsConnection.get_instance(config))


def build_container(
    *,
    store_backend: str = "google",
    sheets_config: Optional[dict] = None,
    language: str = DEFAULT_LANGUAGE,
    name_match_policy: str = NameMatchPolicy.EXACT.value,
    auto_provision: bool = False,
    dedup_ttl_seconds: float = DEFAULT_DEDUP_TTL_SECONDS,
    dedup_max_entries: int = DEFAULT_DEDUP_MAX_ENTRIES,
    env: str = "dev",
    store: Optional[SheetStore] = None,
    sink: Optional[MessageSink] = None,
) -> Container:
    store_backend = (store_backend or "google").lower()
    if store is None:
        store = _build_store(store_backend, sheets_config)
    name_policy = NameMatchPolicy(str(name_match_policy).lower())

    schemas = SchemaRegistry(SchemaDetector(store))
    calculator = StandardOvertimeCalculator()
    locator = RecordLocator(store, schemas, language=language, name_policy=name_policy)
    writer = LedgerWriter(
        store,
        schemas,
        locator,
        calculator=calculator,
        locks=KeyedLocks(),
        language=language,
    )
    approvals = ApprovalStateMachine(locator, writer)
    provisioner = SegmentProvisioner(store, schemas, language=language)
    notifier = Notifier(
        sink or LoggingSink(),
        TTLDedupCache(ttl_seconds=dedup_ttl_seconds, max_entries=dedup_max_entries),
        env=env,
    )
    ledger_service = LedgerService(
        locator,
        writer,
        approvals,
        provisioner,
        calculator=calculator,
        notifier=notifier,
        auto_provision=auto_provision,
    )

    return Container(
        store=store,
        store_backend=store_backend,
        schemas=schemas,
        locator=locator,
        writer=writer,
        approvals=approvals,
        provisioner=provisioner,
        notifier=notifier,
        ledger_service=ledger_service,
    )


def build_container_from_settings(settings, *, store: Optional[SheetStore] = None) -> Container:
    """Wire a container from a ``config.*`` settings module."""
    return build_container(
        store_backend=getattr(settings, "STORE_BACKEND", "google"),
        sheets_config=getattr(settings, "SHEETS_CONFIG", {}),
        language=getattr(settings, "LANGUAGE", DEFAULT_LANGUAGE),
        name_match_policy=getattr(settings, "NAME_MATCH_POLICY", NameMatchPolicy.EXACT.value),
        auto_provision=bool(getattr(settings, "AUTO_PROVISION_SEGMENTS", False)),
        dedup_ttl_seconds=float(getattr(settings, "NOTIFICATION_DEDUP_TTL_SECONDS", DEFAULT_DEDUP_TTL_SECONDS)),
        dedup_max_entries=int(getattr(settings, "NOTIFICATION_DEDUP_MAX_ENTRIES", DEFAULT_DEDUP_MAX_ENTRIES)),
        env=getattr(settings, "NOTIFICATION_ENV", "dev"),
        store=store,
    )
