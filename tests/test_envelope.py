import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from storefront.envelope import (
    BareEnvelope,
    CountEnvelope,
    DataEnvelope,
    RawBody,
    decode_envelope,
    unwrap,
)


def test_data_envelope_returns_data():
    assert unwrap({"success": True, "data": [1, 2, 3]}) == [1, 2, 3]


def test_count_envelope_returns_count():
    assert unwrap({"success": True, "count": 7}) == 7


def test_bare_envelope_returns_whole_body():
    assert unwrap({"success": True}) == {"success": True}


def test_body_without_success_flag_is_unchanged():
    body = {"foo": "bar"}
    assert unwrap(body) == {"foo": "bar"}
    assert isinstance(decode_envelope(body), RawBody)


def test_data_wins_over_count():
    env = decode_envelope({"success": True, "data": {"x": 1}, "count": 3})
    assert isinstance(env, DataEnvelope)
    assert unwrap({"success": True, "data": {"x": 1}, "count": 3}) == {"x": 1}


def test_null_data_is_still_a_data_envelope():
    assert isinstance(decode_envelope({"success": True, "data": None}), DataEnvelope)
    assert unwrap({"success": True, "data": None}) is None


def test_failed_flag_is_still_an_envelope():
    body = {"success": False, "message": "nope"}
    assert isinstance(decode_envelope(body), BareEnvelope)
    assert unwrap(body) == body


def test_count_zero_is_returned_not_skipped():
    assert isinstance(decode_envelope({"success": True, "count": 0}), CountEnvelope)
    assert unwrap({"success": True, "count": 0}) == 0


def test_non_object_bodies_pass_through():
    assert unwrap([1, 2]) == [1, 2]
    assert unwrap(5) == 5
    assert unwrap(None) is None
