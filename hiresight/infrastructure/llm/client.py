"""
Vertex AI REST client for question generation.
"""
import logging
from typing import Optional, Dict, Any, List

import requests
import google.auth
import google.auth.transport.requests
from google.oauth2 import service_account

from ...config import VERTEX_LOCATION, MODEL_NAME, LLM_TIMEOUT, MAX_OUTPUT_TOKENS

logger = logging.getLogger("llm_client")

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


class LLMError(RuntimeError):
    """Raised when the LLM endpoint returns an error or cannot be reached."""


class LLMTimeoutError(LLMError):
    """Raised when the LLM endpoint does not answer within the timeout."""


def extract_text(resp_json: Dict[str, Any]) -> str:
    """
    Text of the first candidate in a generateContent response.

    Raises:
        LLMError: If the response carries no text (blocked prompt, empty candidate)
    """
    candidates = resp_json.get("candidates") or []
    if candidates and isinstance(candidates[0], dict):
        content = candidates[0].get("content") or {}
        parts = [p.get("text") for p in content.get("parts") or [] if isinstance(p, dict)]
        text = "".join(t for t in parts if isinstance(t, str))
        if text:
            return text
        reason = candidates[0].get("finishReason", "no text")
    else:
        feedback = resp_json.get("promptFeedback") or {}
        reason = feedback.get("blockReason", "no candidates")
    raise LLMError(f"Vertex response has no text ({reason})")


class VertexRestClient:
    """
    Calls Gemini models through the Vertex AI generateContent REST endpoint.

    Credentials come from a service-account file when one is given, otherwise from
    application default credentials. The access token is refreshed when it expires
    and once more if the endpoint rejects it.
    """

    def __init__(self,
                 project: str,
                 location: str = VERTEX_LOCATION,
                 model: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 timeout: int = LLM_TIMEOUT):
        self.project = project
        self.location = location
        self.model = model
        self.credentials_json = credentials_json
        self.timeout = timeout
        self.endpoint = (
            f"https://{location}-aiplatform.googleapis.com/v1/projects/{project}"
            f"/locations/{location}/publishers/google/models/{model}:generateContent"
        )
        self._credentials = None

    def _load_credentials(self):
        if self.credentials_json:
            return service_account.Credentials.from_service_account_file(
                self.credentials_json, scopes=SCOPES
            )
        creds, _ = google.auth.default(scopes=SCOPES)
        return creds

    def _access_token(self, force_refresh: bool = False) -> str:
        if self._credentials is None:
            self._credentials = self._load_credentials()
        if force_refresh or not self._credentials.valid:
            logger.debug("Refreshing Vertex access token")
            self._credentials.refresh(google.auth.transport.requests.Request())
        return self._credentials.token

    @staticmethod
    def build_request_body(prompt_text: str,
                           temperature: float,
                           max_output_tokens: int,
                           top_k: Optional[int] = None,
                           top_p: Optional[float] = None,
                           stop_sequences: Optional[List[str]] = None) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {
            "temperature": float(temperature),
            "maxOutputTokens": int(max_output_tokens),
        }
        if top_k is not None:
            generation_config["topK"] = int(top_k)
        if top_p is not None:
            generation_config["topP"] = float(top_p)
        if stop_sequences:
            generation_config["stopSequences"] = list(stop_sequences)
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt_text}]}],
            "generationConfig": generation_config,
        }

    def generate_content(
        self,
        prompt_text: str,
        temperature: float = 0.0,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
        top_k: Optional[int] = None,
        top_p: Optional[float] = None,
        stop_sequences: Optional[List[str]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Generate text for a single-turn prompt.

        Args:
            prompt_text: Prompt sent as one user turn
            temperature: Sampling temperature
            max_output_tokens: Output length limit
            timeout: Per-request timeout in seconds, defaults to the client timeout

        Returns:
            Text of the first candidate

        Raises:
            LLMTimeoutError: If the request times out
            LLMError: On connection failure, an HTTP error status or a response without text
        """
        body = self.build_request_body(
            prompt_text, temperature, max_output_tokens, top_k, top_p, stop_sequences
        )
        timeout = timeout if timeout is not None else self.timeout

        resp = self._post(body, self._access_token(), timeout)
        if resp.status_code == 401:
            logger.info("Vertex rejected the access token, refreshing and retrying once")
            resp = self._post(body, self._access_token(force_refresh=True), timeout)

        if resp.status_code >= 400:
            raise LLMError(f"Vertex REST error {resp.status_code}: {resp.text}")

        try:
            resp_json = resp.json()
        except ValueError as e:
            raise LLMError(f"Vertex returned invalid JSON: {e}") from e
        return extract_text(resp_json)

    def _post(self, body: Dict[str, Any], token: str, timeout: float) -> requests.Response:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            return requests.post(self.endpoint, headers=headers, json=body, timeout=timeout)
        except requests.Timeout as e:
            raise LLMTimeoutError(f"Vertex REST request timed out after {timeout}s: {e}") from e
        except requests.RequestException as e:
            raise LLMError(f"Vertex REST request failed: {e}") from e
