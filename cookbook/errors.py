"""Exceptions raised inside the cookbook pipeline.

None of these ever reach the page: each one is caught close to where it is
raised and the caller falls back to the original (untranslated) content.
"""


class CookbookError(Exception):
    pass


class ResourceLoadError(CookbookError):
    """Content JSON could not be fetched or parsed."""

    def __init__(self, location: str, reason: str):
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason


class GatewayError(CookbookError):
    """Network failure or API-reported error from the translation service."""


class ElementNotFound(CookbookError):
    """An expected hook element is missing from the page."""

    def __init__(self, selector: str):
        super().__init__(f"element not found: {selector}")
        self.selector = selector
