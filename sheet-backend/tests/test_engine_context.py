from __future__ import annotations

import logging

import pytest

from app.crs import engine
from app.crs.boundary import process_engine_record
from app.crs.engine import ProjContext, create_context
from app.options import ProjOptions, get_options, set_options


def test_context_owns_and_releases_handles():
    ctx = create_context(ProjOptions())
    ctx.create_from_epsg(4326)
    ctx.create_from_authority_code("EPSG", 3857)
    assert ctx.live_handles == 2
    ctx.close()
    assert ctx.closed
    assert ctx.live_handles == 0
    # closing twice is harmless
    ctx.close()


def test_closed_context_refuses_work():
    ctx = create_context(ProjOptions())
    ctx.close()
    with pytest.raises(RuntimeError):
        ctx.create_from_epsg(4326)


def test_log_callback_only_when_asked():
    with create_context(ProjOptions(log_level=0)) as ctx:
        assert not ctx.has_log_callback
    with create_context(ProjOptions(log_level=1)) as ctx:
        assert ctx.has_log_callback
    assert engine._bridge_users == 0


def test_pyproj_logger_level_restored():
    plog = logging.getLogger(engine.PYPROJ_LOGGER)
    before = plog.level
    with create_context(ProjOptions(log_level=2)):
        assert plog.level == logging.DEBUG
        with create_context(ProjOptions(log_level=1)):
            assert plog.level == logging.DEBUG
        assert plog.level == logging.DEBUG
    assert plog.level == before


def test_bridged_engine_error_is_logged_once(caplog):
    caplog.set_level(logging.DEBUG)
    plog = logging.getLogger(engine.PYPROJ_LOGGER)
    with create_context(ProjOptions(log_level=1)):
        assert plog.propagate is False
        plog.debug("PROJ_ERROR: proj_create: crs not found")
    assert plog.propagate is True
    msgs = [(r.name, r.levelno) for r in caplog.records if "crs not found" in r.getMessage()]
    assert msgs == [("app.crs.engine.proj", logging.WARNING)]


def test_create_context_reads_process_options():
    saved = get_options()
    try:
        set_options(ProjOptions(log_level=1, allow_network=False))
        with create_context() as ctx:
            assert ctx.options.log_level == 1
    finally:
        set_options(saved)


def test_network_flag_is_applied(monkeypatch):
    calls = []
    monkeypatch.setattr(engine.proj_network, "set_network_enabled", lambda active=None: calls.append(active))
    with ProjContext(ProjOptions(allow_network=True)):
        pass
    with ProjContext(ProjOptions(allow_network=False)):
        pass
    assert calls == [True, False]


def test_engine_errors_raised_to_warning(caplog):
    caplog.set_level(logging.DEBUG, logger="app.crs.engine.proj")
    rec = logging.LogRecord("pyproj", logging.DEBUG, __file__, 1, "PROJ_ERROR: proj_create: crs not found", None, None)
    process_engine_record(rec)
    rec = logging.LogRecord("pyproj", logging.DEBUG, __file__, 1, "PROJ_DEBUG: something", None, None)
    process_engine_record(rec)
    levels = [r.levelno for r in caplog.records if r.name == "app.crs.engine.proj"]
    assert levels == [logging.WARNING, logging.DEBUG]


def test_bridge_filters_by_level(monkeypatch):
    seen = []
    monkeypatch.setattr(engine, "process_engine_record", lambda r: seen.append(r.getMessage()))
    bridge = engine._ProjLogBridge(log_level=1)
    for msg in ("PROJ_ERROR: bad", "PROJ_DEBUG: chatter"):
        bridge.handle(logging.LogRecord("pyproj", logging.DEBUG, __file__, 1, msg, None, None))
    assert seen == ["PROJ_ERROR: bad"]
