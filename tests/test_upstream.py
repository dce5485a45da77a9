"""
Tests for the upstream chat-completion client.

Covers:
- request construction (auth header, model, messages)
- each failure stage: transport, envelope decode, shape, content decode
"""

import asyncio
import json

import httpx
import pytest

from quizboard.core.errors import (
    UpstreamContentError,
    UpstreamFormatError,
    UpstreamShapeError,
    UpstreamTransportError,
)
from quizboard.core.prompts import PromptPurpose, PromptTemplate
from quizboard.core.upstream import build_messages, decode_content, decode_envelope, extract_content

PROMPT = PromptTemplate(PromptPurpose.ANSWER_CHECK, "You grade answers. Reply with JSON.")
PAYLOAD = {"question": "Capital of France?", "correct_answers": ["Paris"], "user_answer": "Paris", "mode": "strict"}


def _complete(upstream, payload=PAYLOAD):
    return asyncio.run(upstream.complete(PROMPT, payload))


# =============================================================================
# Request construction
# =============================================================================

class TestRequest:

    def test_build_messages(self):
        messages = build_messages(PROMPT, {"a": "é"})
        assert messages == [
            {"role": "system", "content": PROMPT.text},
            {"role": "user", "content": '{"a": "é"}'},
        ]

    def test_sends_one_chat_completion(self, upstream, provider, settings):
        provider.reply({"correct": True})
        _complete(upstream)

        assert len(provider.calls) == 1
        request = provider.calls[0]
        assert request.method == "POST"
        assert str(request.url) == "https://provider.test/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer test-key"

        body = provider.sent_json()
        assert body["model"] == settings.model
        assert body["messages"][0] == {"role": "system", "content": PROMPT.text}
        assert body["messages"][1]["role"] == "user"
        assert json.loads(body["messages"][1]["content"]) == PAYLOAD

    def test_returns_inner_document(self, upstream, provider):
        provider.reply({"correct": True, "score": 1})
        assert _complete(upstream) == {"correct": True, "score": 1}

    def test_inner_document_may_be_any_json(self, upstream, provider):
        provider.reply_content("[1, 2, 3]")
        assert _complete(upstream) == [1, 2, 3]


# =============================================================================
# Failure stages
# =============================================================================

class TestFailures:

    def test_http_error_carries_status_and_body(self, upstream, provider):
        provider.fail(429, '{"error": {"message": "Rate limit reached"}}')
        with pytest.raises(UpstreamTransportError) as exc:
            _complete(upstream)
        assert exc.value.status == 429
        assert "Rate limit reached" in exc.value.body
        assert "429" in str(exc.value)

    def test_server_error_is_not_retried(self, upstream, provider):
        provider.fail(503, "upstream unavailable")
        with pytest.raises(UpstreamTransportError) as exc:
            _complete(upstream)
        assert exc.value.body == "upstream unavailable"
        assert len(provider.calls) == 1

    def test_network_failure(self, upstream, provider):
        provider.error = httpx.ConnectError("connection refused")
        with pytest.raises(UpstreamTransportError) as exc:
            _complete(upstream)
        assert exc.value.status is None
        assert len(provider.calls) == 1

    def test_envelope_not_json(self, upstream, provider):
        provider.body = "<html>gateway timeout</html>"
        with pytest.raises(UpstreamFormatError):
            _complete(upstream)

    @pytest.mark.parametrize(
        "envelope",
        [
            {},
            {"choices": []},
            {"choices": [{}]},
            {"choices": [{"message": {}}]},
            {"choices": [{"message": {"content": None}}]},
            {"choices": [{"message": {"content": ""}}]},
        ],
    )
    def test_envelope_missing_content(self, upstream, provider, envelope):
        provider.body = json.dumps(envelope)
        with pytest.raises(UpstreamShapeError):
            _complete(upstream)

    def test_content_not_json(self, upstream, provider):
        provider.reply_content("Sure! Here is the result: correct")
        with pytest.raises(UpstreamContentError) as exc:
            _complete(upstream)
        assert exc.value.content == "Sure! Here is the result: correct"

    def test_fenced_content_is_not_repaired(self, upstream, provider):
        provider.reply_content('```json\n{"correct": true}\n```')
        with pytest.raises(UpstreamContentError):
            _complete(upstream)

    @pytest.mark.parametrize(
        "content",
        [
            '{"correct": true, "score": NaN}',
            '{"score": Infinity}',
            "[-Infinity]",
            "NaN",
        ],
    )
    def test_non_standard_constants_in_content(self, upstream, provider, content):
        provider.reply_content(content)
        with pytest.raises(UpstreamContentError):
            _complete(upstream)

    def test_non_standard_constants_in_envelope(self, upstream, provider):
        provider.body = '{"choices": [{"message": {"content": "{}"}}], "usage": {"total_time": NaN}}'
        with pytest.raises(UpstreamFormatError):
            _complete(upstream)


# =============================================================================
# Decode helpers
# =============================================================================

class TestDecodeStages:

    def test_stages_fail_distinctly(self):
        with pytest.raises(UpstreamFormatError):
            decode_envelope("not json")
        with pytest.raises(UpstreamFormatError):
            decode_envelope("[1]")
        with pytest.raises(UpstreamShapeError):
            extract_content({"choices": [{"message": {"content": 5}}]})
        with pytest.raises(UpstreamContentError):
            decode_content("{'single': 'quotes'}")

    def test_full_decode(self):
        envelope = decode_envelope(json.dumps({"choices": [{"message": {"content": '{"ok": 1}'}}]}))
        assert decode_content(extract_content(envelope)) == {"ok": 1}
