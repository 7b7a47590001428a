from src.driver_ledger.driver_ledger.core.enums import ClockEventType, OvertimeStatus
from src.driver_ledger.driver_ledger.notifications.dedup_cache import TTLDedupCache
from src.driver_ledger.driver_ledger.notifications.notifier import Notifier
from src.driver_ledger.driver_ledger.overtime.model import OvertimeResult


def test_same_message_is_sent_once(sink):
    notifier = Notifier(sink, TTLDedupCache(), env="prod")

    assert notifier.notify("Somchai clocked in") is True
    assert notifier.notify("Somchai clocked in") is False
    assert notifier.notify("") is False
    assert sink.sent == [("prod", "Somchai clocked in")]


def test_dedup_key_uses_message_prefix(sink):
    notifier = Notifier(sink, TTLDedupCache())
    head = "x" * 100

    notifier.notify(head + "first tail")
    notifier.notify(head + "second tail")

    assert len(sink.sent) == 1


def test_environments_do_not_share_keys(sink):
    cache = TTLDedupCache()

    Notifier(sink, cache, env="dev").notify("hello")
    Notifier(sink, cache, env="prod").notify("hello")

    assert [env for env, _ in sink.sent] == ["dev", "prod"]


def test_clock_event_message(sink):
    notifier = Notifier(sink, TTLDedupCache())
    ot = OvertimeResult(OvertimeStatus.COMPUTED, "17:00", "17:40", evening_minutes=40)

    notifier.clock_event(
        driver_name="Somchai", date_text="5/8/2568", event=ClockEventType.CLOCK_OUT, time_text="17:40", overtime=ot,
    )
    notifier.clock_event(
        driver_name="Anan", date_text="5/8/2568", event=ClockEventType.CLOCK_IN, time_text="08:15",
        overtime=OvertimeResult(OvertimeStatus.WITHIN_STANDARD_HOURS),
    )

    assert sink.sent[0][1] == "Somchai\n5/8/2568 Clock Out: 17:40\nOT 17:00-17:40 (0.67 h)"
    assert sink.sent[1][1] == "Anan\n5/8/2568 Clock In: 08:15"
