"""Tests for the LiteLLM client wrapper."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from docinsight.rag.llm_client import complete, embed, stream, validate_api_key


# ------------------------------------------------------------------
# validate_api_key
# ------------------------------------------------------------------


def test_validate_api_key_raises_if_missing(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(EnvironmentError, match="OPENAI_API_KEY"):
        validate_api_key("openai/gpt-4o-mini")


def test_validate_api_key_passes_if_set(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key")
    validate_api_key("openai/gpt-4o-mini")


def test_validate_api_key_anthropic(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(EnvironmentError, match="ANTHROPIC_API_KEY"):
        validate_api_key("anthropic/claude-3-5-haiku-20241022")


def test_validate_api_key_ollama_no_key_required():
    validate_api_key("ollama/nomic-embed-text")


def test_validate_api_key_bare_model_treated_as_openai(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(EnvironmentError, match="OPENAI_API_KEY"):
        validate_api_key("text-embedding-3-small")


def test_validate_api_key_unlisted_provider_uses_convention(monkeypatch):
    monkeypatch.delenv("VOYAGE_API_KEY", raising=False)
    with pytest.raises(EnvironmentError, match="VOYAGE_API_KEY"):
        validate_api_key("voyage/voyage-3")


# ------------------------------------------------------------------
# complete()
# ------------------------------------------------------------------


def test_complete_returns_content():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = "The notice period is 30 days."

    with patch("docinsight.rag.llm_client.litellm.completion", return_value=mock_response):
        result = complete("openai/gpt-4o-mini", [{"role": "user", "content": "Hi"}])

    assert result == "The notice period is 30 days."


def test_complete_returns_empty_string_on_none_content():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = None

    with patch("docinsight.rag.llm_client.litellm.completion", return_value=mock_response):
        result = complete("openai/gpt-4o-mini", [{"role": "user", "content": "Hi"}])

    assert result == ""


def test_complete_passes_params_to_litellm():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = "ok"

    with patch("docinsight.rag.llm_client.litellm.completion", return_value=mock_response) as mock_c:
        complete(
            "openai/gpt-4o-mini",
            [{"role": "user", "content": "test"}],
            max_tokens=512,
            temperature=0.5,
            num_retries=2,
        )

    call_kwargs = mock_c.call_args.kwargs
    assert call_kwargs["model"] == "openai/gpt-4o-mini"
    assert call_kwargs["max_tokens"] == 512
    assert call_kwargs["temperature"] == 0.5
    assert call_kwargs["num_retries"] == 2
    assert "stream" not in call_kwargs


# ------------------------------------------------------------------
# stream()
# ------------------------------------------------------------------


def _part(content):
    part = MagicMock()
    part.choices = [MagicMock()]
    part.choices[0].delta.content = content
    return part


def _stream_response(contents):
    response = MagicMock()
    response.__iter__.return_value = iter([_part(c) for c in contents])
    return response


def test_stream_yields_non_empty_fragments():
    response = _stream_response([None, "The ", "", "answer", None])

    with patch("docinsight.rag.llm_client.litellm.completion", return_value=response) as mock_c:
        fragments = list(stream("openai/gpt-4o-mini", [{"role": "user", "content": "q"}]))

    assert fragments == ["The ", "answer"]
    assert mock_c.call_args.kwargs["stream"] is True
    response.close.assert_called_once()


def test_stream_is_lazy():
    with patch("docinsight.rag.llm_client.litellm.completion") as mock_c:
        gen = stream("openai/gpt-4o-mini", [{"role": "user", "content": "q"}])
        mock_c.assert_not_called()
        gen.close()
    mock_c.assert_not_called()


def test_stream_closed_early_releases_response():
    response = _stream_response(["a", "b", "c"])

    with patch("docinsight.rag.llm_client.litellm.completion", return_value=response):
        gen = stream("openai/gpt-4o-mini", [{"role": "user", "content": "q"}])
        assert next(gen) == "a"
        gen.close()

    response.close.assert_called_once()


def test_stream_skips_parts_without_choices():
    empty = MagicMock()
    empty.choices = []
    response = MagicMock()
    response.__iter__.return_value = iter([empty, _part("ok")])

    with patch("docinsight.rag.llm_client.litellm.completion", return_value=response):
        assert list(stream("openai/gpt-4o-mini", [])) == ["ok"]


# ------------------------------------------------------------------
# embed()
# ------------------------------------------------------------------


def test_embed_returns_vector():
    mock_response = MagicMock()
    mock_response.data = [{"embedding": [0.1, 0.2, 0.3]}]

    with patch("docinsight.rag.llm_client.litellm.embedding", return_value=mock_response):
        result = embed("openai/text-embedding-3-small", "hello")

    assert result == [0.1, 0.2, 0.3]


def test_embed_passes_text_as_list():
    mock_response = MagicMock()
    mock_response.data = [{"embedding": [0.0]}]

    with patch("docinsight.rag.llm_client.litellm.embedding", return_value=mock_response) as mock_e:
        embed("openai/text-embedding-3-small", "test text", num_retries=5)

    assert mock_e.call_args.kwargs["input"] == ["test text"]
    assert mock_e.call_args.kwargs["num_retries"] == 5
