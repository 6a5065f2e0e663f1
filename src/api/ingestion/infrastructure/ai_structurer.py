"""Resume structuring through an OpenAI-compatible chat completions API."""

from __future__ import annotations

import httpx

from ingestion.ports.exceptions import StructuringError
from ingestion.ports.services import ResumeStructurer

SYSTEM_PROMPT = """\
You are a professional resume parser. Convert the provided resume text into \
STRICT JSON for a developer portfolio with exactly this structure:
{
  "summary": "A professional summary (max 300 chars)",
  "skills": ["Python", "PostgreSQL", "React"],
  "experience": [
    {"company": "Company Name", "role": "Job Title",
     "points": ["Key achievement or responsibility."]}
  ],
  "projects": [
    {"name": "Project Name", "techStack": "FastAPI, PostgreSQL",
     "points": ["What it does."]}
  ]
}
Return only the JSON object, without markdown code fences or commentary."""


class OpenAIResumeStructurer(ResumeStructurer):
    """Sends resume text to a chat completions endpoint.

    Transport failures, rate limiting and 5xx responses are retryable;
    any other rejection or an unusable response body is not.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        timeout_seconds: float = 60,
        temperature: float = 0.1,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the structurer.

        Args:
            base_url: API root, e.g. ``https://api.openai.com/v1``
            api_key: Bearer credential for the API
            model: Chat model name
            timeout_seconds: Request timeout
            temperature: Sampling temperature
            client: Shared client; a short-lived one is used per call if omitted
        """
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._api_key = api_key
        self._model = model
        self._timeout = timeout_seconds
        self._temperature = temperature
        self._client = client

    async def structure(self, text: str) -> str:
        """Return the model's raw answer for ``text``.

        Raises:
            StructuringError: If the call failed or the answer has no content
        """
        payload = {
            "model": self._model,
            "temperature": self._temperature,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Here is the resume text:\n\n{text}"},
            ],
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            if self._client is not None:
                resp = await self._client.post(
                    self._url, json=payload, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(self._url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise StructuringError(f"AI request failed: {e}", retryable=True) from e

        if resp.status_code == 429 or resp.status_code >= 500:
            raise StructuringError(
                f"AI service unavailable (HTTP {resp.status_code})", retryable=True
            )
        if resp.status_code >= 400:
            raise StructuringError(f"AI request rejected (HTTP {resp.status_code})")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise StructuringError("AI response has no message content") from e

        if not isinstance(content, str) or not content.strip():
            raise StructuringError("AI response is empty")
        return content.strip()
