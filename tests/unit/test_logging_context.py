import logging

from infrastructure.observability.logging import (
    ContextInjectFilter,
    clear_session_context,
    get_log_context,
    make_session_tag,
    record_scope,
    set_log_context,
)


def test_session_tag_is_stable_and_short() -> None:
    assert make_session_tag("20260101_acme_placement_table") == make_session_tag("20260101_acme_placement_table")
    assert len(make_session_tag("abc")) == 8
    assert make_session_tag("abc") != make_session_tag("abd")


def test_context_is_injected_into_records() -> None:
    set_log_context(session_id_full="run-1", client_id="acme", consumer="placement")
    try:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        assert ContextInjectFilter().filter(record)
        assert record.session == make_session_tag("run-1")
        assert record.client == "acme"

        ctx = get_log_context()
        assert ctx["consumer"] == "placement"
        assert ctx["session_id_full"] == "run-1"
    finally:
        clear_session_context()

    ctx = get_log_context()
    assert ctx["session_tag"] == "-"
    assert ctx["client_id"] == "acme"


def test_record_scope_is_restored_on_exit() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    inject = ContextInjectFilter()

    with record_scope("pl1"):
        inject.filter(record)
        assert record.record == "pl1"
        with record_scope(None):
            inject.filter(record)
            assert record.record == "-"
        inject.filter(record)
        assert record.record == "pl1"

    inject.filter(record)
    assert record.record == "-"
