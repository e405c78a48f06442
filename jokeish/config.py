"""Application settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables

    e.g. AUTH0_API_AUDIENCE -> auth0_api_audience
    """

    auth0_api_audience: str
    """
    Expected value for "aud" claim in all bearer tokens
    """

    auth0_domain: str
    """
    Expected value for "iss" claim, also the base URL of the published JWKS
    e.g. https://example.eu.auth0.com/
    """

    jwks_timeout: float = 10.0
    """
    Timeout in seconds for fetching the JWKS
    """

    jwks_cache_ttl: float = 0
    """
    Seconds to cache resolved signing keys, 0 fetches the JWKS on every request
    """

    jokes_path: str | None = None
    """
    Optional path to jokes.yaml, the built-in jokes are served if unset
    """

    model_config = SettingsConfigDict(use_attribute_docstrings=True)
