"""Scraping provider errors and their user-facing messages."""

from typing import Optional, Tuple


class ProviderError(Exception):
    """Failure talking to a scraping provider.

    Attributes:
        provider: "scrapecreators" or "apify"
        status_code: HTTP status returned to API clients
        message: Message safe to show to end users
    """

    status_code = 500

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider
        if status_code is not None:
            self.status_code = status_code

    def __str__(self):
        return self.message


class ProviderConfigError(ProviderError):
    status_code = 500


class ProviderAuthError(ProviderError):
    status_code = 401


class ProviderCreditsError(ProviderError):
    status_code = 402


class ProviderNotFoundError(ProviderError):
    status_code = 404


class ProviderTimeoutError(ProviderError):
    status_code = 408


class ProviderRateLimitError(ProviderError):
    status_code = 429


class ProviderRunError(ProviderError):
    """An Apify actor run finished in a failed state."""
    status_code = 502


PROVIDER_LABELS = {
    "scrapecreators": "ScrapeCreators",
    "apify": "Apify",
}


def error_for_status(provider: str, status_code: int, body: str = "") -> ProviderError:
    """
    Build the provider error matching an HTTP status.

    Args:
        provider: Provider key
        status_code: HTTP status code of the failed response
        body: Response body, used for the generic message

    Returns:
        ProviderError subclass instance
    """
    label = PROVIDER_LABELS.get(provider, provider)
    token_word = "API token" if provider == "apify" else "API key"

    if status_code == 401:
        return ProviderAuthError(f"{label} {token_word} is invalid or expired", provider)
    if status_code == 402:
        return ProviderCreditsError(f"{label} credits exhausted. Please top up your account.", provider)
    if status_code == 404:
        return ProviderNotFoundError(f"{label}: profile or content not found", provider)
    if status_code == 429:
        return ProviderRateLimitError(f"{label} rate limit reached. Please try again later.", provider)
    return ProviderError(f"{label} API error {status_code}: {body[:300]}", provider, status_code=500)


def map_provider_error(exc: Exception) -> Tuple[int, str]:
    """
    Map any exception raised while scraping to an HTTP status and message.

    Provider errors carry their own status. Other exceptions are classified
    by the text of their message.

    Returns:
        (status_code, message)
    """
    if isinstance(exc, ProviderError):
        return exc.status_code, exc.message

    message = str(exc) or exc.__class__.__name__
    lowered = message.lower()

    if "401" in message or "api key" in lowered or "api token" in lowered:
        return 401, "Invalid or expired API key/token"
    if "402" in message or "credits" in lowered:
        return 402, "Provider credits exhausted"
    if "429" in message or "rate limit" in lowered:
        return 429, "Rate limit reached. Please try again later."
    if "timeout" in lowered:
        return 408, "Timeout waiting for the provider to respond"
    if "404" in message or "not found" in lowered:
        return 404, "Profile or content not found"
    return 500, message
