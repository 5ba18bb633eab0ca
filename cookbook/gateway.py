"""Client for the remote translation service (LibreTranslate-compatible)."""
import logging
from typing import List, Union

import requests

from .config import SOURCE_LANGUAGE, TRANSLATE_API_KEY, TRANSLATE_API_URL
from .errors import GatewayError

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ('rate', 'Slowdown', 'Too many')

TextOrTexts = Union[str, List[str]]


def batch_failed(sent: List[str], received: List[str]) -> bool:
    """The service signals a failed batch by echoing the input back."""
    return list(sent) == list(received)


class TranslationGateway:
    """Single-attempt translation calls. Any failure returns the input unchanged."""

    def __init__(self, url: str = TRANSLATE_API_URL, api_key: str = TRANSLATE_API_KEY,
                 source_language: str = SOURCE_LANGUAGE):
        self.url = url
        self.api_key = api_key
        self.source_language = source_language

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.url.strip())

    def translate(self, text: TextOrTexts, target_lang: str) -> TextOrTexts:
        """Translate a string or a list of strings into ``target_lang``.

        Returns the input unchanged on a network error, an ``error`` field in
        the response, or a response that does not mirror the request shape.
        """
        if not self.enabled or not text:
            return text
        try:
            return self._post(text, target_lang)
        except GatewayError as e:
            message = str(e)
            if any(marker in message for marker in RATE_LIMIT_MARKERS):
                logger.info(f"Translation API rate limited, using original text: {message}")
            else:
                logger.warning(f"Translation API error: {message}")
            return text

    def _post(self, text: TextOrTexts, target_lang: str) -> TextOrTexts:
        payload = {
            'q': text,
            'source': self.source_language,
            'target': target_lang,
            'format': 'text',
            'alternatives': 1,
            'api_key': self.api_key,
        }
        try:
            response = requests.post(self.url, json=payload)
            result = response.json()
        except requests.RequestException as e:
            raise GatewayError(f"request failed: {e}") from e
        except ValueError as e:
            raise GatewayError(f"malformed response: {e}") from e

        if not isinstance(result, dict):
            raise GatewayError("unexpected response format")
        if result.get('error'):
            raise GatewayError(str(result['error']))

        translated = result.get('translatedText')
        if isinstance(text, list):
            if not isinstance(translated, list) or len(translated) != len(text):
                raise GatewayError("batch response does not mirror the request")
            return [t if isinstance(t, str) and t else original
                    for t, original in zip(translated, text)]
        if not isinstance(translated, str) or not translated:
            raise GatewayError("missing translatedText")
        return translated
