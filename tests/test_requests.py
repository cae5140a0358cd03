"""Tests for resolving request fields."""
from uroute.requests import resolve_fields


def test_positional():
    request = {"method": "GET", "url": "/a", "called": "21"}
    assert resolve_fields(request, ["called", "url"]) == ["21", "/a"]
    assert resolve_fields(request, []) == []


def test_missing_fields_are_none():
    assert resolve_fields({"url": "/"}, ["url", "missing"]) == ["/", None]


def test_params_shadow_request_fields():
    request = {"url": "/test"}
    assert resolve_fields(request, ["url"], {"url": "test"}) == ["test"]
    assert resolve_fields(request, ["url"]) == ["/test"]
    assert request == {"url": "/test"}


def test_whole_request():
    request = {"url": "/"}
    assert resolve_fields(request, ["request"]) == [request]
    assert resolve_fields({"request": 1}, ["request"]) == [1]


def test_reads_current_state():
    request = {"called": ""}
    fields = ["called"]
    assert resolve_fields(request, fields) == [""]
    request["called"] += "2"
    assert resolve_fields(request, fields) == ["2"]
