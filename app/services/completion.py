import base64
import logging

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from app.core.config import CompletionProvider
from app.services.errors import EmptyResponse, MissingCredential, UpstreamError

logger = logging.getLogger(__name__)

MAX_OUTPUT_TOKENS = 1000
SUMMARY_TEMPERATURE = 0.3
CHAT_TEMPERATURE = 0.7

SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful medical assistant that analyzes medical reports and lab results. "
    "Explain findings clearly and concisely in layman terms while maintaining accuracy."
)

SUMMARY_PROMPT = """Analyze this medical report image and provide a comprehensive summary in simple, layman language.

Please include:
1. Key health metrics and test results
2. Normal vs abnormal findings
3. Any concerning values or patterns
4. Overall health assessment
5. Recommendations (if any are visible in the report)

Keep the summary friendly, clear, and easy to understand for non-medical professionals."""


def image_data_uri(content: bytes, extension: str) -> str:
    b64 = base64.standard_b64encode(content).decode("utf-8")
    return f"data:image/{extension};base64,{b64}"


def build_summary_messages(content: bytes, extension: str) -> list[dict]:
    return [
        {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": SUMMARY_PROMPT},
                {"type": "image_url", "image_url": {"url": image_data_uri(content, extension), "detail": "high"}},
            ],
        },
    ]


def _first_choice_text(response) -> str | None:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else None


class CompletionClient:
    """
    Chat-completions transport shared by report summaries and the assistant chat.
    One non-streaming request per call, no retries, bounded by `timeout` seconds.
    """

    def __init__(
        self,
        provider: CompletionProvider | None,
        *,
        timeout: float = 60.0,
        http_client: httpx.Client | None = None,
    ):
        self.provider = provider
        self.timeout = timeout
        self._http_client = http_client
        self._client: OpenAI | None = None

    def _get_client(self) -> OpenAI:
        if self.provider is None:
            raise MissingCredential()
        if self._client is None:
            self._client = OpenAI(
                api_key=self.provider.api_key,
                base_url=self.provider.base_url,
                timeout=self.timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._client

    def close(self) -> None:
        """Releases the underlying HTTP connections."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def complete(
        self,
        messages: list[dict],
        *,
        temperature: float,
        purpose: str,
        max_tokens: int = MAX_OUTPUT_TOKENS,
    ) -> str | None:
        """Returns the first choice's text, or None when the upstream sent none."""
        client = self._get_client()
        logger.info(
            "Completion request: provider=%s model=%s purpose=%s messages=%s",
            self.provider.kind.value,
            self.provider.model,
            purpose,
            len(messages),
        )
        try:
            response = client.chat.completions.create(
                model=self.provider.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                stream=False,
                extra_headers=self.provider.request_headers(purpose),
            )
        except APIStatusError as e:
            body = e.response.text if e.response is not None else str(e)
            logger.error("Completion API error: status=%s body=%s", e.status_code, body[:500])
            raise UpstreamError(e.status_code, body) from e
        except APITimeoutError as e:
            logger.error("Completion API timed out after %ss", self.timeout)
            raise UpstreamError(504, "Request timed out") from e
        except APIConnectionError as e:
            logger.exception("Completion API connection error: %s", e)
            raise UpstreamError(502, str(e)) from e
        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(
                "Completion usage: prompt_tokens=%s completion_tokens=%s",
                getattr(usage, "prompt_tokens", 0),
                getattr(usage, "completion_tokens", 0),
            )
        return _first_choice_text(response)

    def summarize_image(self, content: bytes, extension: str) -> str:
        text = self.complete(
            build_summary_messages(content, extension),
            temperature=SUMMARY_TEMPERATURE,
            purpose="Medical Analysis",
        )
        if not text or not text.strip():
            logger.error("Completion returned no content for %s image", extension)
            raise EmptyResponse()
        return text.strip()
