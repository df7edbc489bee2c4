import math
import time

import pytest

from advisorbridge.bridge import (
    InvalidResponseError,
    ReceiveFailedError,
    RequestCorrelator,
    RequestTimeoutError,
    RpcRequest,
    SendFailedError,
    StartFailedError,
)
from advisorbridge.bridge.supervisor import ProcessSupervisor


def test_first_request_starts_advisor_once(make_supervisor):
    supervisor = make_supervisor()
    correlator = RequestCorrelator(supervisor, response_timeout=10)

    first = correlator.send_request(RpcRequest(method="getProfile", params={"user": "u1"}, id=1))
    second = correlator.send_request(RpcRequest(method="getProfile", params={"user": "u2"}, id=2))

    assert supervisor.generation == 1
    assert first.id == 1 and second.id == 2
    assert first.result["params"] == {"user": "u1"}
    assert first.result["pid"] == second.result["pid"] == supervisor.pid


def test_multiline_reply_with_braces_in_strings(make_supervisor):
    correlator = RequestCorrelator(make_supervisor(), response_timeout=10)
    response = correlator.send_request(RpcRequest(method="echo", params={"text": "{not} \"json\""}, id="s-1"))
    assert response.ok
    assert response.id == "s-1"
    assert response.result["note"] == 'brace } in "string"'
    assert response.result["params"] == {"text": '{not} "json"'}


def test_error_reply_is_returned_not_raised(make_supervisor):
    correlator = RequestCorrelator(make_supervisor(), response_timeout=10)
    response = correlator.send_request(RpcRequest(method="fail", id=4))
    assert not response.ok
    assert response.error.code == -32601


def test_stdout_noise_and_repeated_handshake_are_skipped(make_supervisor):
    correlator = RequestCorrelator(make_supervisor(), response_timeout=10)
    response = correlator.send_request(RpcRequest(method="noisy", id=11))
    assert response.id == 11
    assert response.result["method"] == "noisy"


def test_silent_advisor_times_out(make_supervisor):
    supervisor = make_supervisor("silent")
    correlator = RequestCorrelator(supervisor, response_timeout=0.5)
    with pytest.raises(RequestTimeoutError) as exc_info:
        correlator.send_request(RpcRequest(method="ping", id=1))
    assert str(exc_info.value) == "Timeout waiting for advisor response"
    assert exc_info.value.code == "TIMEOUT"
    # A timeout leaves the process alone.
    assert supervisor.is_running()


def test_advisor_death_mid_request_is_receive_failure(make_supervisor):
    supervisor = make_supervisor()
    correlator = RequestCorrelator(supervisor, response_timeout=10)
    with pytest.raises(ReceiveFailedError) as exc_info:
        correlator.send_request(RpcRequest(method="die", id=1))
    assert "advisor disconnected" in str(exc_info.value)


def test_next_request_after_death_spawns_new_generation(make_supervisor):
    supervisor = make_supervisor()
    correlator = RequestCorrelator(supervisor, response_timeout=10)
    with pytest.raises(ReceiveFailedError):
        correlator.send_request(RpcRequest(method="die", id=1))
    supervisor.current.process.wait(timeout=5)

    response = correlator.send_request(RpcRequest(method="ping", id=2))
    assert response.ok
    assert supervisor.generation == 2


def test_reply_without_result_or_error_is_invalid(make_supervisor):
    correlator = RequestCorrelator(make_supervisor(), response_timeout=10)
    with pytest.raises(InvalidResponseError) as exc_info:
        correlator.send_request(RpcRequest(method="garbage", id=5))
    assert str(exc_info.value).startswith("Invalid JSON response: ")


def test_unserializable_params_fail_before_sending(make_supervisor, read_events):
    correlator = RequestCorrelator(make_supervisor(), response_timeout=10)
    with pytest.raises(SendFailedError):
        correlator.send_request(RpcRequest(method="m", params={"x": math.inf}, id=1))
    assert read_events() == []


def test_late_reply_from_timed_out_request_is_discarded(make_supervisor):
    supervisor = make_supervisor()
    correlator = RequestCorrelator(supervisor, response_timeout=0.2)
    with pytest.raises(RequestTimeoutError):
        correlator.send_request(RpcRequest(method="sleep", params={"seconds": 0.6}, id=1))

    # The late answer for id 1 lands in the incoming channel meanwhile.
    time.sleep(1.0)
    correlator.response_timeout = 10
    response = correlator.send_request(RpcRequest(method="ping", id=2))
    assert response.id == 2


def test_stale_message_is_drained_before_send(make_supervisor):
    supervisor = make_supervisor()
    correlator = RequestCorrelator(supervisor, response_timeout=10)
    supervisor.start()
    supervisor.incoming.send('{"jsonrpc":"2.0","result":"stale","id":99}')

    response = correlator.send_request(RpcRequest(method="ping", id=3))
    assert response.id == 3


def test_start_failure_propagates(tmp_path):
    correlator = RequestCorrelator(ProcessSupervisor(tmp_path / "missing", settle_delay=0))
    with pytest.raises(StartFailedError):
        correlator.send_request(RpcRequest(method="ping", id=1))
