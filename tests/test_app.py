import time

from clipvault.config import PipelineConfig
from clipvault.main import ClipVaultApp, build_config, parse_args
from clipvault.models import ContentType
from clipvault.services import HISTORY_EVENT, UPDATE_EVENT

from conftest import ScriptedClipboard


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def _fast_config(tmp_path, **overrides):
    return PipelineConfig(
        poll_interval=0.01,
        throttle=0.0,
        db_path=tmp_path / "history.db",
        **overrides,
    )


def test_app_emits_history_then_records_changes(tmp_path, store, recorder):
    store.insert_if_not_duplicate("from last run", ContentType.TEXT)

    clipboard = ScriptedClipboard(["from last run", "fresh", "fresh"])
    app = ClipVaultApp(
        config=_fast_config(tmp_path),
        clipboard=clipboard,
        store=store,
        listeners=[recorder],
    )

    with app:
        assert recorder.payloads(HISTORY_EVENT)[0]["content"] == "from last run"
        assert _wait_for(lambda: "fresh" in recorder.payloads(UPDATE_EVENT))
        assert app.persistence_service.wait_idle(timeout=5.0)

    contents = [e.content for e in store.list_recent()]
    # the first sample matches the stored row, so only "fresh" is added
    assert contents == ["fresh", "from last run"]
    assert recorder.payloads(UPDATE_EVENT) == ["from last run", "fresh"]


def test_app_opens_configured_store(tmp_path, recorder):
    clipboard = ScriptedClipboard(["hello"])
    app = ClipVaultApp(config=_fast_config(tmp_path), clipboard=clipboard, listeners=[recorder])

    app.start()
    try:
        assert _wait_for(lambda: app.history.get_history() != [])
        assert app.history.get_history()[0].content == "hello"
    finally:
        app.stop()

    assert not app.running
    assert app.relay.closed


def test_history_limit_applies_to_startup_events(tmp_path, store, recorder):
    for i in range(5):
        store.insert_if_not_duplicate(f"e{i}", ContentType.TEXT, f"2025-01-01T00:00:0{i}.000000+00:00")

    app = ClipVaultApp(
        config=_fast_config(tmp_path, history_limit=2),
        clipboard=ScriptedClipboard(),
        store=store,
        listeners=[recorder],
    )
    with app:
        pass

    assert [p["content"] for p in recorder.payloads(HISTORY_EVENT)] == ["e4", "e3"]


def test_cli_flags_override_config(tmp_path):
    args = parse_args([
        "--poll-interval", "0.5",
        "--capacity", "4",
        "--policy", "drop",
        "--db-path", str(tmp_path / "cli.db"),
    ])

    config = build_config(args)

    assert config.poll_interval == 0.5
    assert config.relay_capacity == 4
    assert config.relay_policy == "drop"
    assert config.db_path == tmp_path / "cli.db"
