import os
import ssl
from typing import Any, Optional


def expand_path(path):
    """Expand environment variables and user home directory in path."""
    if not path:
        return path
    # Expand environment variables like $HOME
    path = os.path.expandvars(path)
    # Expand user home directory ~
    path = os.path.expanduser(path)
    return path


def create_ssl_context():
    # Try truststore first (system certificates)
    try:
        import truststore

        return truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    except ImportError:
        # Fallback to manual certificate configuration
        import certifi

        ssl_cert_file = expand_path(os.environ.get("SSL_CERT_FILE"))
        requests_ca_bundle = expand_path(os.environ.get("REQUESTS_CA_BUNDLE"))
        ssl_cert_dir = expand_path(os.environ.get("SSL_CERT_DIR"))

        return ssl.create_default_context(
            cafile=ssl_cert_file or requests_ca_bundle or certifi.where(),
            capath=ssl_cert_dir,
        )


def get_httpx_client_kwargs(
    timeout: Optional[float] = None, follow_redirects: bool = True
) -> dict[str, Any]:
    """Keyword arguments shared by the sync and async httpx clients.

    Args:
        timeout: Default timeout in seconds. ``None`` keeps httpx's default.
        follow_redirects: Whether redirects are followed automatically.

    Returns:
        dict: SSL, timeout and redirect settings for ``httpx.Client``.
    """
    kwargs: dict[str, Any] = {
        "verify": create_ssl_context(),
        "follow_redirects": follow_redirects,
    }
    if timeout is not None:
        kwargs["timeout"] = timeout
    return kwargs
