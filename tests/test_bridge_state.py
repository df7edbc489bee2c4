import threading
from types import SimpleNamespace

import pytest

from advisorbridge.bridge import (
    AdvisorBridge,
    ReceiveFailedError,
    RpcRequest,
    StartFailedError,
    get_bridge,
    reset_bridge,
    set_bridge,
)
from advisorbridge.bridge import state as bridge_state
from advisorbridge.bridge.supervisor import ProcessSupervisor
from advisorbridge.config.schema import Config


@pytest.fixture(autouse=True)
def _clean_singleton():
    set_bridge(None)
    yield
    reset_bridge()


def test_concurrent_requests_never_interleave(make_bridge, read_events):
    bridge = make_bridge()
    responses: dict[int, object] = {}
    errors: list[Exception] = []

    def _call(request_id: int):
        try:
            responses[request_id] = bridge.send_request(
                RpcRequest(method="sleep", params={"seconds": 0.05}, id=request_id)
            )
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=_call, args=(i,)) for i in range(1, 7)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    assert {rid: r.id for rid, r in responses.items()} == {i: i for i in range(1, 7)}
    events = read_events()
    assert len(events) == 12
    for recv_event, send_event in zip(events[::2], events[1::2]):
        assert recv_event.startswith("recv ")
        assert send_event == "send " + recv_event.split(" ", 1)[1]


def test_health_check_reports_state(make_bridge):
    bridge = make_bridge()
    assert bridge.health_check() == {"status": "ok", "bridgeState": "stopped"}
    bridge.start()
    assert bridge.health_check() == {"status": "ok", "bridgeState": "running"}
    assert bridge.is_running()
    bridge.stop()
    assert bridge.health_check()["bridgeState"] == "stopped"


def test_ping_sends_empty_params(make_bridge):
    response = make_bridge().ping()
    assert response.ok
    assert response.result["method"] == "ping"
    assert response.result["params"] == {}
    assert isinstance(response.id, int) and response.id > 0


def test_restart_replaces_process(make_bridge):
    bridge = make_bridge()
    first = bridge.ping().result["pid"]
    bridge.restart()
    second = bridge.ping().result["pid"]
    assert first != second
    assert bridge.supervisor.generation == 2


def test_context_manager_stops_bridge(make_bridge):
    with make_bridge() as bridge:
        bridge.start()
        assert bridge.is_running()
    assert not bridge.is_running()


def test_trace_methods_log_params(make_bridge):
    from loguru import logger

    messages: list[str] = []
    sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="INFO")
    try:
        bridge = make_bridge(trace_methods=["getWeeklyRecommendations"])
        bridge.send_request(RpcRequest(method="getWeeklyRecommendations", params={"week": 3}, id=1))
        bridge.send_request(RpcRequest(method="getProfile", params={"user": "x"}, id=2))
    finally:
        logger.remove(sink_id)
    assert "=== getWeeklyRecommendations request ===" in messages
    assert "week: 3" in messages
    assert not any("getProfile request" in m for m in messages)


def test_from_config_uses_resolved_path(tmp_path):
    config = Config()
    config.bridge.advisor_path = str(tmp_path / "advisor-bin")
    config.bridge.repl_flag = "--serve"
    bridge = AdvisorBridge.from_config(config)
    assert bridge.supervisor.command() == [str(tmp_path / "advisor-bin"), "--serve"]
    assert bridge.trace_methods == frozenset({"getWeeklyRecommendations"})


def test_send_request_propagates_start_failure(tmp_path):
    bridge = AdvisorBridge(ProcessSupervisor(tmp_path / "missing", settle_delay=0))
    with pytest.raises(StartFailedError):
        bridge.send_request(RpcRequest(method="ping", id=1))
    assert bridge.health_check()["bridgeState"] == "stopped"


def test_get_bridge_creates_singleton_once(monkeypatch, tmp_path):
    calls = {"n": 0}
    original = AdvisorBridge.from_config

    def _counting_from_config(config):
        calls["n"] += 1
        return original(config)

    monkeypatch.setattr(bridge_state.AdvisorBridge, "from_config", staticmethod(_counting_from_config))
    config = SimpleNamespace(
        bridge=SimpleNamespace(repl_flag="--repl", trace_methods=[]),
        resolve_advisor_path=lambda: tmp_path / "advisor",
    )
    first = get_bridge(config)
    second = get_bridge()
    assert first is second
    assert calls["n"] == 1


def test_set_bridge_installs_instance(tmp_path):
    bridge = AdvisorBridge(ProcessSupervisor(tmp_path / "advisor"))
    set_bridge(bridge)
    assert get_bridge() is bridge


def test_restart_after_death_mid_request_reaches_fresh_process(make_bridge):
    bridge = make_bridge()
    first_pid = bridge.ping().result["pid"]

    with pytest.raises(ReceiveFailedError):
        bridge.send_request(RpcRequest(method="die", id=1))
    bridge.restart()
    response = bridge.send_request(RpcRequest(method="getProfile", params={"user": "u1"}, id=2))

    assert response.id == 2
    assert response.result["params"] == {"user": "u1"}
    assert response.result["pid"] != first_pid
    assert bridge.supervisor.generation == 2
