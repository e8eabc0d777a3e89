"""LiteLLM client wrapper with retry, backoff, and API key validation.

All completion, streaming and embedding calls route through this module.
LiteLLM's built-in retry is used (num_retries=3, exponential backoff).
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import litellm

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True


# ------------------------------------------------------------------
# Provider → env var mapping for API key validation
# ------------------------------------------------------------------

_PROVIDER_ENV: dict[str, str | None] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "azure": "AZURE_API_KEY",
    "cohere": "COHERE_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "groq": "GROQ_API_KEY",
    "ollama": None,  # Local, no key required
    "ollama_chat": None,
}


def validate_api_key(model: str) -> None:
    """Check that the required API key env var is set for *model*.

    Args:
        model: LiteLLM model string in 'provider/model' format.

    Raises:
        EnvironmentError: If the required key is missing from environment.
    """
    provider = model.split("/")[0].lower() if "/" in model else "openai"
    env_var = _PROVIDER_ENV.get(provider, f"{provider.upper()}_API_KEY")

    if env_var is None:
        return

    if not os.getenv(env_var):
        raise EnvironmentError(
            f"API key not found for provider '{provider}'. "
            f"Set the {env_var} environment variable."
        )


def complete(
    model: str,
    messages: list[dict],
    max_tokens: int = 1024,
    temperature: float = 0.2,
    num_retries: int = 3,
) -> str:
    """Call litellm.completion() and return the full content string.

    Raises:
        litellm.exceptions.APIError: On persistent API failure after retries.
    """
    response = litellm.completion(
        model=model,
        messages=messages,
        max_tokens=max_tokens,
        temperature=temperature,
        num_retries=num_retries,
    )
    return response.choices[0].message.content or ""


def stream(
    model: str,
    messages: list[dict],
    max_tokens: int = 1024,
    temperature: float = 0.2,
    num_retries: int = 3,
) -> Iterator[str]:
    """Yield text fragments as the model produces them.

    The request is only sent once the first fragment is requested. Closing
    the generator early (or exhausting it) closes the underlying stream.
    Empty deltas (role headers, finish markers) are skipped.
    """
    response = litellm.completion(
        model=model,
        messages=messages,
        max_tokens=max_tokens,
        temperature=temperature,
        num_retries=num_retries,
        stream=True,
    )
    try:
        for part in response:
            delta = part.choices[0].delta.content if part.choices else None
            if delta:
                yield delta
    finally:
        if hasattr(response, "close"):
            response.close()


def embed(model: str, text: str, num_retries: int = 3) -> list[float]:
    """Call litellm.embedding() and return the embedding vector."""
    response = litellm.embedding(
        model=model,
        input=[text],
        num_retries=num_retries,
    )
    return response.data[0]["embedding"]
