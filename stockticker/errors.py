"""Error taxonomy for quote resolution.

Every error carries a short ``code`` that the quote endpoint hands back to
the client verbatim as ``err``.
"""

from __future__ import annotations


class QuoteError(Exception):
    """Base class for recoverable quote-resolution errors."""

    code = "error"


class InvalidToken(QuoteError):
    """The request-forgery token is missing, expired or forged."""

    code = "bad_nonce"


class MissingSymbol(QuoteError):
    """The request did not name a symbol."""

    code = "no_symbol"


class MissingApiKey(QuoteError):
    """No API key is configured for the selected provider."""

    code = "no_key"


class UpstreamUnavailable(QuoteError):
    """Network failure, timeout, HTTP error or malformed body from a provider."""

    code = "upstream_unavailable"


class NoValidQuote(QuoteError):
    """The provider answered but without a usable price."""

    code = "no_valid_quote"
