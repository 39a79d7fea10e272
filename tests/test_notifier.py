from clipvault.models import ClipboardEntry, ContentType
from clipvault.services import HISTORY_EVENT, UPDATE_EVENT, Notifier


def test_emit_reaches_every_listener():
    notifier = Notifier()
    first, second = [], []
    notifier.subscribe(lambda name, payload: first.append((name, payload)))
    notifier.subscribe(lambda name, payload: second.append((name, payload)))

    notifier.emit(UPDATE_EVENT, "hello")

    assert first == second == [(UPDATE_EVENT, "hello")]


def test_failing_listener_is_isolated(caplog):
    notifier = Notifier()
    received = []

    def broken(name, payload):
        raise RuntimeError("ui gone")

    notifier.subscribe(broken)
    notifier.subscribe(lambda name, payload: received.append(payload))

    notifier.emit(UPDATE_EVENT, "still delivered")

    assert received == ["still delivered"]
    assert "Listener failed" in caplog.text


def test_unsubscribe():
    notifier = Notifier()
    received = []
    unsubscribe = notifier.subscribe(lambda name, payload: received.append(payload))

    unsubscribe()
    unsubscribe()
    notifier.emit(UPDATE_EVENT, "ignored")

    assert received == []


def test_emit_history_sends_one_event_per_entry(recorder, notifier):
    entries = [
        ClipboardEntry(id=2, content="b", timestamp="2025-01-01T00:00:02+00:00", content_type=ContentType.TEXT),
        ClipboardEntry(id=1, content="[1]", timestamp="2025-01-01T00:00:01+00:00", content_type=ContentType.JSON),
    ]

    assert notifier.emit_history(entries) == 2

    payloads = recorder.payloads(HISTORY_EVENT)
    assert [p["id"] for p in payloads] == [2, 1]
    assert payloads[1]["content_type"] == "json"
