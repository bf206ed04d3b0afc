"""Handshake state and id correlation."""

import logging

import pytest

from qmp_protocol import (
    Handshake,
    HandshakeError,
    HandshakeState,
    OobCommand,
    QmpCapability,
    SchemaViolationError,
    UnknownCapability,
    commands,
    decode_response,
    encode,
)

GREETING = '{"QMP": {"version": {"qemu": {"major": 8, "minor": 2, "micro": 0}, "package": ""}, "capabilities": ["oob"]}}'


def test_starts_awaiting_greeting():
    hs = Handshake()
    assert hs.state is HandshakeState.AWAITING_GREETING
    assert not hs.negotiated
    assert hs.capabilities == frozenset()


def test_commands_refused_before_greeting():
    with pytest.raises(HandshakeError):
        Handshake().prepare(commands.query_version())


def test_greeting_negotiates():
    hs = Handshake()
    greeting = hs.receive_greeting(GREETING)
    assert hs.state is HandshakeState.NEGOTIATED
    assert hs.greeting == greeting
    assert hs.capabilities == frozenset({QmpCapability.OOB})


def test_capabilities_keep_unknown_tokens():
    hs = Handshake()
    hs.receive_greeting(GREETING.replace('["oob"]', '["oob", "future-cap"]'))
    assert hs.capabilities == frozenset({QmpCapability.OOB, UnknownCapability("future-cap")})
    assert "future-cap" not in hs.capabilities


def test_second_greeting_rejected():
    hs = Handshake()
    hs.receive_greeting(GREETING)
    with pytest.raises(HandshakeError):
        hs.receive_greeting(GREETING)


def test_malformed_greeting_keeps_state():
    hs = Handshake()
    with pytest.raises(SchemaViolationError):
        hs.receive_greeting('{"QMP": {"capabilities": []}}')
    assert hs.state is HandshakeState.AWAITING_GREETING


def test_prepare_assigns_increasing_ids():
    hs = Handshake()
    hs.receive_greeting(GREETING)
    first = hs.prepare(commands.query_version())
    second = hs.prepare(commands.query_status().as_oob())
    assert encode(first) == '{"execute":"query-version","id":1}'
    assert isinstance(second, OobCommand)
    assert second.id == 2
    assert hs.pending == frozenset({1, 2})


def test_accept_matches_and_clears():
    hs = Handshake(first_id=10)
    hs.receive_greeting(GREETING)
    hs.prepare(commands.stop())
    assert hs.accept(decode_response('{"return": {}, "id": 10}'))
    assert hs.pending == frozenset()
    assert not hs.accept(decode_response('{"return": {}, "id": 10}'))


def test_unmatched_responses_are_dropped(caplog):
    hs = Handshake()
    hs.receive_greeting(GREETING)
    hs.prepare(commands.stop())
    with caplog.at_level(logging.WARNING, logger="qmp_protocol.handshake"):
        assert not hs.accept(decode_response('{"return": {}}'))
        assert not hs.accept(decode_response('{"return": {}, "id": 99}'))
        assert not hs.accept(decode_response('{"return": {}, "id": {"a": 1}}'))
    assert "without id" in caplog.text
    assert "unknown id 99" in caplog.text
    assert hs.pending == frozenset({1})


def test_error_response_still_matches():
    hs = Handshake()
    hs.receive_greeting(GREETING)
    hs.prepare(commands.system_reset())
    assert hs.accept(decode_response('{"error": "GenericError", "desc": "nope", "id": 1}'))
