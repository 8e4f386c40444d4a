"""Tests for the property lookup collaborator."""

import json
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from hotel_rater.exceptions import LookupAuthenticationError, LookupParseError, LookupRateLimitError
from hotel_rater.lookup.claude import ClaudePropertyLookup
from hotel_rater.lookup.images import fetch_images
from hotel_rater.lookup.parsing import extract_json_object, merge_vision, normalize_property, pop_image_urls
from hotel_rater.models import LookupSettings

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 6000


def _text_response(text: str) -> SimpleNamespace:
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class FakeMessages:
    """Returns queued responses and records calls."""

    def __init__(self, responses: list) -> None:
        self.responses = list(responses)
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _client(*responses) -> SimpleNamespace:
    return SimpleNamespace(messages=FakeMessages(list(responses)))


def _image_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("ok.png"):
            return httpx.Response(200, headers={"content-type": "image/png"}, content=PNG)
        if request.url.path.endswith("tiny.png"):
            return httpx.Response(200, headers={"content-type": "image/png"}, content=b"x" * 10)
        if request.url.path.endswith("page.html"):
            return httpx.Response(200, headers={"content-type": "text/html"}, content=b"<html>" * 2000)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class TestParsing:
    """Tests for response parsing and normalization."""

    def test_extracts_json_from_prose(self) -> None:
        text = 'Here is the data:\n```json\n{"room_count": 120, "state": "fl"}\n```\nDone.'
        assert extract_json_object(text) == {"room_count": 120, "state": "fl"}

    def test_no_json_raises(self) -> None:
        with pytest.raises(LookupParseError):
            extract_json_object("I could not find that hotel.")

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(LookupParseError):
            extract_json_object("{not json}")

    def test_pop_image_urls(self) -> None:
        data = {"image_urls": ["https://a/1.jpg", "ftp://b", 7, "http://c/2.jpg", "https://d/3.jpg"]}
        assert pop_image_urls(data, 2) == ["https://a/1.jpg", "http://c/2.jpg"]
        assert "image_urls" not in data

    def test_normalize_property(self) -> None:
        out = normalize_property(
            {
                "property_name": "Seaside Inn",
                "state": "fl",
                "room_count": 120,
                "lot_size": None,
                "amenities": {"pool": "yes"},
                "confidence_level": "HIGH",
                "data_sources": ["LoopNet", ""],
                "unexpected": "dropped",
            }
        )
        assert out["state"] == "FL"
        assert out["amenities"]["pool"] is True
        assert out["amenities"]["spa"] is False
        assert out["confidence_level"] == "high"
        assert out["data_sources"] == ["LoopNet"]
        assert "lot_size" not in out
        assert "unexpected" not in out

    def test_merge_vision(self) -> None:
        record = {"stories": 4, "construction_type": "Frame", "amenities": {"pool": False}}
        vision = {
            "stories": 6,
            "construction_type": "Masonry Non-Combustible",
            "roof_type": "flat",
            "visible_amenities": {"pool": True},
            "photo_notes": "",
        }
        out = merge_vision(record, vision, 2)
        assert out["stories"] == 6
        assert out["construction_type"] == "Masonry Non-Combustible"
        assert out["amenities"]["pool"] is True
        assert out["photo_analysis"]["roof_type"] == "flat"
        assert out["photo_analysis"]["photo_notes"] is None
        assert out["photo_analysis"]["images_analyzed"] == 2
        assert record["stories"] == 4

    def test_merge_vision_keeps_text_values_when_missing(self) -> None:
        out = merge_vision({"stories": 4}, {}, 1)
        assert out["stories"] == 4


class TestImageFetch:
    """Tests for the bounded concurrent image fetch."""

    def test_filters_failures(self) -> None:
        client = httpx.Client(transport=_image_transport())
        urls = ["https://x/ok.png", "https://x/tiny.png", "https://x/page.html", "https://x/missing.png"]
        images = fetch_images(urls, LookupSettings(), client)
        assert len(images) == 1
        assert images[0].media_type == "image/png"
        assert images[0].url == "https://x/ok.png"

    def test_caps_image_count(self) -> None:
        client = httpx.Client(transport=_image_transport())
        urls = [f"https://x/{i}/ok.png" for i in range(8)]
        assert len(fetch_images(urls, LookupSettings(max_images=3), client)) == 3

    def test_connection_errors_are_isolated(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "bad" in request.url.host:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, headers={"content-type": "image/jpeg"}, content=PNG)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        images = fetch_images(["https://bad/1.jpg", "https://good/2.jpg"], LookupSettings(), client)
        assert [img.url for img in images] == ["https://good/2.jpg"]

    def test_no_urls(self) -> None:
        assert fetch_images([], LookupSettings()) == []

    def test_rejects_declared_oversize(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-type": "image/png"}, content=b"x" * 500)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        settings = LookupSettings(min_image_bytes=1, max_image_bytes=100)
        assert fetch_images(["https://x/big.png"], settings, client) == []

    def test_stops_reading_chunked_body_at_cap(self) -> None:
        sent: list[int] = []

        def chunks():
            for i in range(10):
                sent.append(i)
                yield b"x" * 60

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-type": "image/png"}, content=chunks())

        client = httpx.Client(transport=httpx.MockTransport(handler))
        settings = LookupSettings(min_image_bytes=1, max_image_bytes=100)
        assert fetch_images(["https://x/stream.png"], settings, client) == []
        assert len(sent) < 10


class TestClaudeLookup:
    """Tests for the two-step lookup with a fake model client."""

    def test_search_and_vision(self, profile) -> None:
        search = {
            "property_name": "Hampton Inn Tampa",
            "brand": "Hampton Inn",
            "state": "FL",
            "stories": 4,
            "construction_type": "Frame",
            "confidence_level": "medium",
            "image_urls": ["https://x/ok.png", "https://x/missing.png"],
        }
        vision = {"stories": 5, "construction_type": "Masonry Non-Combustible", "estimated_condition": "good"}
        client = _client(_text_response(json.dumps(search)), _text_response(json.dumps(vision)))
        lookup = ClaudePropertyLookup(
            client=client,
            brand_catalog=profile.brands,
            http_client=httpx.Client(transport=_image_transport()),
        )

        result = lookup.lookup("Hampton Inn Tampa")

        assert result.images_found == 2
        assert result.images_analyzed == 1
        assert result.confidence_level == "medium"
        assert result.property["stories"] == 5
        assert result.property["construction_type"] == "Masonry Non-Combustible"
        assert result.property["photo_analysis"]["estimated_condition"] == "good"
        # Filled from brand defaults
        assert result.property["room_count"] == 120
        assert result.property["service_type"] == "limited-service"

        first, second = client.messages.calls
        assert first["tools"][0]["type"] == "web_search_20250305"
        assert first["tools"][0]["max_uses"] == 10
        assert second["messages"][0]["content"][0]["type"] == "image"

    def test_no_images_skips_vision(self) -> None:
        client = _client(_text_response('{"property_name": "Motel", "room_count": 40}'))
        result = ClaudePropertyLookup(client=client).lookup("Motel")
        assert result.property == {"property_name": "Motel", "room_count": 40}
        assert len(client.messages.calls) == 1

    def test_unparseable_search(self) -> None:
        client = _client(_text_response("Sorry, nothing found."))
        with pytest.raises(LookupParseError):
            ClaudePropertyLookup(client=client).lookup("Nowhere Hotel")

    def test_unparseable_vision_keeps_search_record(self) -> None:
        search = {"stories": 4, "image_urls": ["https://x/ok.png"]}
        client = _client(_text_response(json.dumps(search)), _text_response("cannot tell"))
        lookup = ClaudePropertyLookup(client=client, http_client=httpx.Client(transport=_image_transport()))
        result = lookup.lookup("Somewhere")
        assert result.property["stories"] == 4
        assert "photo_analysis" not in result.property
        assert result.errors

    def test_rate_limit_mapped(self) -> None:
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        response = httpx.Response(429, headers={"retry-after": "30"}, request=request)
        error = anthropic.RateLimitError("rate limited", response=response, body=None)
        with pytest.raises(LookupRateLimitError) as exc:
            ClaudePropertyLookup(client=_client(error)).lookup("Any Hotel")
        assert exc.value.retry_after == 30.0
        assert "30 seconds" in exc.value.retry_guidance

    def test_auth_error_mapped(self) -> None:
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        response = httpx.Response(401, request=request)
        error = anthropic.AuthenticationError("bad key", response=response, body=None)
        with pytest.raises(LookupAuthenticationError):
            ClaudePropertyLookup(client=_client(error)).lookup("Any Hotel")

    def test_missing_api_key(self, monkeypatch) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(LookupAuthenticationError):
            ClaudePropertyLookup()
