"""Provider client tests: request payloads and error mapping (httpx mocked, no network)."""

import asyncio
import json
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from sarvatra.core.config import get_settings
from sarvatra.services.provider import (
    ProviderError,
    check_api_key,
    complete_text,
    transcribe_audio,
)

COMPLETION_BODY = {"choices": [{"message": {"role": "assistant", "content": "Bonjour"}}]}


def _response(status_code: int = 200, body: object = None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body
    resp.text = text
    return resp


def _wire(mock_client_class: MagicMock, method: str, side_effect: object) -> MagicMock:
    mock_instance = MagicMock()
    setattr(mock_instance, method, AsyncMock(side_effect=side_effect))
    mock_client_class.return_value.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_client_class.return_value.__aexit__ = AsyncMock(return_value=None)
    return mock_instance


class TestCompleteText(unittest.TestCase):
    @patch("sarvatra.services.provider.httpx.AsyncClient")
    def test_payload_and_result(self, mock_client_class: MagicMock) -> None:
        captured: dict[str, object] = {}

        async def fake_post(url: str, **kwargs: object) -> MagicMock:
            captured["url"] = url
            captured.update(kwargs)
            return _response(body=COMPLETION_BODY)

        _wire(mock_client_class, "post", fake_post)
        settings = get_settings()
        result = asyncio.run(complete_text("sk-user", "Translate:", "Hello", 0.3, settings))

        self.assertEqual(result, "Bonjour")
        self.assertTrue(str(captured["url"]).endswith("/chat/completions"))
        self.assertEqual(captured["headers"], {"Authorization": "Bearer sk-user"})
        payload = captured["json"]
        assert isinstance(payload, dict)
        self.assertEqual(payload["model"], settings.PROVIDER_CHAT_MODEL)
        self.assertEqual(payload["max_tokens"], settings.PROVIDER_MAX_TOKENS)
        self.assertEqual(payload["temperature"], 0.3)
        self.assertEqual(
            payload["messages"],
            [
                {"role": "system", "content": "Translate:"},
                {"role": "user", "content": "Hello"},
            ],
        )

    @patch("sarvatra.services.provider.httpx.AsyncClient")
    def test_status_codes_map_to_kinds(self, mock_client_class: MagicMock) -> None:
        for status_code, kind in ((401, "invalid_key"), (429, "quota"), (500, "bad_response")):
            with self.subTest(status_code=status_code):
                _wire(mock_client_class, "post", [_response(status_code=status_code)])
                with self.assertRaises(ProviderError) as ctx:
                    asyncio.run(complete_text("sk", "p", "t", 0.1, get_settings()))
                self.assertEqual(ctx.exception.kind, kind)

    @patch("sarvatra.services.provider.httpx.AsyncClient")
    def test_transport_failures(self, mock_client_class: MagicMock) -> None:
        cases = (
            (httpx.ConnectError("refused"), "unreachable"),
            (httpx.ReadTimeout("slow"), "timeout"),
        )
        for error, kind in cases:
            with self.subTest(kind=kind):
                _wire(mock_client_class, "post", error)
                with self.assertRaises(ProviderError) as ctx:
                    asyncio.run(complete_text("sk", "p", "t", 0.1, get_settings()))
                self.assertEqual(ctx.exception.kind, kind)
                self.assertIs(ctx.exception.cause, error)

    @patch("sarvatra.services.provider.httpx.AsyncClient")
    def test_malformed_body(self, mock_client_class: MagicMock) -> None:
        not_json = _response()
        not_json.json.side_effect = json.JSONDecodeError("bad", "", 0)
        for resp in (not_json, _response(body={"choices": []}), _response(body=["x"])):
            with self.subTest(body=resp.json.return_value):
                _wire(mock_client_class, "post", [resp])
                with self.assertRaises(ProviderError) as ctx:
                    asyncio.run(complete_text("sk", "p", "t", 0.1, get_settings()))
                self.assertEqual(ctx.exception.kind, "bad_response")


class TestTranscribeAudio(unittest.TestCase):
    @patch("sarvatra.services.provider.httpx.AsyncClient")
    def test_upload_and_text(self, mock_client_class: MagicMock) -> None:
        captured: dict[str, object] = {}

        async def fake_post(url: str, **kwargs: object) -> MagicMock:
            captured["url"] = url
            captured.update(kwargs)
            return _response(text="  hello world \n")

        _wire(mock_client_class, "post", fake_post)
        settings = get_settings()
        result = asyncio.run(transcribe_audio("sk", b"\x00\x01", "webm", settings))

        self.assertEqual(result, "hello world")
        self.assertTrue(str(captured["url"]).endswith("/audio/transcriptions"))
        self.assertEqual(captured["files"], {"file": ("audio.webm", b"\x00\x01", "audio/webm")})
        data = captured["data"]
        assert isinstance(data, dict)
        self.assertEqual(data["model"], settings.PROVIDER_TRANSCRIPTION_MODEL)


class TestCheckApiKey(unittest.TestCase):
    @patch("sarvatra.services.provider.httpx.AsyncClient")
    def test_accepted_and_rejected(self, mock_client_class: MagicMock) -> None:
        for status_code, expected in ((200, True), (401, False), (403, False)):
            with self.subTest(status_code=status_code):
                _wire(mock_client_class, "get", [_response(status_code=status_code)])
                self.assertIs(asyncio.run(check_api_key("sk", get_settings())), expected)

    @patch("sarvatra.services.provider.httpx.AsyncClient")
    def test_quota_is_an_error(self, mock_client_class: MagicMock) -> None:
        _wire(mock_client_class, "get", [_response(status_code=429)])
        with self.assertRaises(ProviderError):
            asyncio.run(check_api_key("sk", get_settings()))


if __name__ == "__main__":
    unittest.main()
