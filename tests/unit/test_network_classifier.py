"""Unit tests for network classification and endpoint trust."""

import pytest

from quality.config import MAX_BITRATE
from quality.network_classifier import NetworkClassifier


@pytest.fixture
def classifier() -> NetworkClassifier:
    return NetworkClassifier(
        max_bitrate=MAX_BITRATE, internal_domain_patterns=["*.local", "*.corp.example"]
    )


class TestClassify:
    """Network hint scoring and bitrate ceiling."""

    @pytest.mark.parametrize(
        "effective_type, expected",
        [("4g", 1.0), ("3g", 0.7), ("2g", 0.4), ("slow-2g", 0.2), ("5g", 1.0), (None, 1.0)],
    )
    def test_network_type_scores(self, classifier, effective_type, expected):
        info = classifier.classify(effective_type=effective_type, ws_quality_score=expected)

        # Same ws score as type score keeps the average equal to the type score
        assert info.quality == pytest.approx(expected)

    def test_combined_quality_averages_scores(self, classifier):
        info = classifier.classify(effective_type="3g", ws_quality_score=0.5)

        assert info.quality == pytest.approx(0.6)
        assert info.effective_type == "3g"
        assert info.ws_quality_score == 0.5

    def test_defaults_when_hint_missing(self, classifier):
        info = classifier.classify()

        assert info.effective_type == "4g"
        assert info.downlink_mbps == 10.0
        assert info.max_bitrate == 10_000_000

    @pytest.mark.parametrize(
        "downlink, expected",
        [(2.5, 2_500_000), (50.0, MAX_BITRATE), (0.0, 10_000_000), (float("nan"), 10_000_000)],
    )
    def test_bitrate_ceiling(self, classifier, downlink, expected):
        info = classifier.classify(downlink_mbps=downlink)

        assert info.max_bitrate == expected

    def test_latency_carried_through(self, classifier):
        info = classifier.classify(latency_ms=75.0)

        assert info.latency_ms == 75.0


class TestTrustedEndpoint:
    """Trusted/local endpoint detection."""

    @pytest.mark.parametrize(
        "url",
        [
            "http://localhost:8000/",
            "http://192.168.1.5/",
            "https://10.0.0.1:8443/stream",
            "http://0.0.0.0/",
            "http://[2001:db8::1]/",
            "http://[2001:0db8:0000:0000:0000:0000:0000:0001]:8080/",
            "http://[::1]/",
            "http://camera.local/",
            "https://stream.corp.example/",
            "HTTP://LOCALHOST/",
        ],
    )
    def test_trusted(self, classifier, url):
        assert classifier.is_trusted_endpoint(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/",
            "http://256.1.1.1/",
            "http://1.2.3/",
            "ftp://192.168.1.5/",
            "ws://localhost/",
            "http://[::1",
            "not a url",
            "",
            None,
            "http://local/",
            "http://evil-local.com/",
            "http://\u0661\u0669\u0662.\u0661\u0666\u0668.\u0661.\u0665/",
        ],
    )
    def test_untrusted(self, classifier, url):
        assert classifier.is_trusted_endpoint(url) is False


def test_ipv4_literal_requires_ascii_digits():
    """Non-ASCII digit hostnames are domain names, not address literals."""
    from quality.network_classifier import is_ipv4_literal

    assert is_ipv4_literal("192.168.1.5") is True
    assert is_ipv4_literal("١٩٢.١٦٨.١.٥") is False
    assert is_ipv4_literal("１.２.３.４") is False
