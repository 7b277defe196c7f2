import hashlib
import logging

# Create the library logger
logger = logging.getLogger("paginantic")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_token(token: str | None) -> str | None:
    """
    Redacts an opaque cursor token for logging.
    Tokens carry raw row values, so only a short hash is emitted to allow
    correlation between log lines without revealing the values.
    """
    if token is None:
        return None
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:8]
