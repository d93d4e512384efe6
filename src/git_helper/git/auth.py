"""
Git authentication utilities.

This module handles bearer tokens embedded in HTTPS remote URLs:
injecting them, removing them, and masking them for safe logging.
"""

from urllib.parse import urlparse, urlunparse


def is_https_url(url: str) -> bool:
    """Check whether a remote URL uses the HTTPS scheme."""
    return url.startswith("https://")


def embed_token(url: str, token: str) -> str:
    """
    Embed an access token into an HTTPS Git URL.

    Any credential already present in the URL is removed first, so the
    result always carries exactly one.

    Args:
        url: HTTPS remote URL
        token: Access token

    Returns:
        URL of the form https://<token>@host/...

    Raises:
        ValueError: If the URL is not HTTPS

    Example:
        ```python
        embed_token("https://olduser@github.com/org/repo.git", "ghp_xxxx")
        # Result: https://ghp_xxxx@github.com/org/repo.git
        ```
    """
    if not is_https_url(url):
        raise ValueError("Only HTTPS URLs can carry an embedded token")

    clean = strip_credentials(url)
    return clean.replace("https://", f"https://{token}@", 1)


def strip_credentials(url: str) -> str:
    """
    Remove credentials from a Git URL.

    Args:
        url: URL possibly containing credentials

    Returns:
        URL with credentials removed

    Example:
        ```python
        clean = strip_credentials("https://token@github.com/user/repo.git")
        # Result: https://github.com/user/repo.git
        ```
    """
    return _rebuild_netloc(url, prefix="")


def mask_credentials(url: str) -> str:
    """
    Mask credentials in a Git URL for safe logging.

    Strings that are not URLs are returned unchanged.

    Args:
        url: URL possibly containing credentials

    Returns:
        URL with credentials masked as ***

    Example:
        ```python
        masked = mask_credentials("https://token@github.com/user/repo.git")
        # Result: https://***@github.com/user/repo.git
        ```
    """
    return _rebuild_netloc(url, prefix="***@")


def _rebuild_netloc(url: str, prefix: str) -> str:
    try:
        parsed = urlparse(url)
        if not parsed.username:
            return url
        port = parsed.port
    except ValueError:
        return url

    # netloc format: user:pass@host:port
    if port:
        netloc = f"{prefix}{parsed.hostname}:{port}"
    else:
        netloc = f"{prefix}{parsed.hostname or ''}"

    return urlunparse((
        parsed.scheme,
        netloc,
        parsed.path,
        parsed.params,
        parsed.query,
        parsed.fragment,
    ))
