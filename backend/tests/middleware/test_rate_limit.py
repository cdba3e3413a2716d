# tests/middleware/test_rate_limit.py
"""
Tests for the limiter key: forwarded headers count only behind a trusted proxy.
"""

import pytest
from starlette.requests import Request

from finance_engine.config import settings
from finance_engine.middleware import rate_limit


def make_request(client_host: str, headers: dict[str, str] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": (client_host, 50000),
    }
    return Request(scope)


@pytest.fixture
def proxy_settings(monkeypatch):
    monkeypatch.setattr(settings, "trust_proxy_headers", False)
    monkeypatch.setattr(settings, "trusted_proxy_ips", ["10.0.0.1"])


class TestClientIp:
    def test_direct_client(self, proxy_settings):
        request = make_request("203.0.113.7")

        assert rate_limit._get_client_ip(request) == "203.0.113.7"

    def test_forwarded_header_ignored_from_untrusted_client(self, proxy_settings):
        request = make_request("203.0.113.7", {"X-Forwarded-For": "1.2.3.4"})

        assert rate_limit._get_client_ip(request) == "203.0.113.7"

    def test_forwarded_first_hop_from_trusted_proxy(self, proxy_settings):
        request = make_request("10.0.0.1", {"X-Forwarded-For": "1.2.3.4, 10.0.0.1"})

        assert rate_limit._get_client_ip(request) == "1.2.3.4"

    def test_real_ip_from_trusted_proxy(self, proxy_settings):
        request = make_request("10.0.0.1", {"X-Real-IP": " 5.6.7.8 "})

        assert rate_limit._get_client_ip(request) == "5.6.7.8"

    def test_trust_all_proxies(self, proxy_settings, monkeypatch):
        monkeypatch.setattr(settings, "trust_proxy_headers", True)
        request = make_request("203.0.113.7", {"X-Forwarded-For": "1.2.3.4"})

        assert rate_limit._get_client_ip(request) == "1.2.3.4"


def test_limiter_disabled_under_test_environment():
    assert rate_limit.limiter.enabled is False
