import os
from typing import Dict, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from ._utils.constants import DOTENV_FILE, ENV_BASE_URL, ENV_TIMEOUT
from .models.errors import BaseUrlMissingError, ConfigurationError


class RestwireConfig(BaseModel):
    """Settings shared by every endpoint of a client.

    Attributes:
        base_url: URL that relative endpoint paths are resolved against.
        timeout: Default request timeout in seconds. Endpoints with their own
            timeout override it.
        follow_redirects: Whether the bundled transport follows redirects.
        headers: Headers sent with every request by the bundled transport.
    """

    base_url: str
    timeout: Optional[float] = None
    follow_redirects: bool = True
    headers: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_env(
        cls,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        dotenv_path: Optional[Union[str, os.PathLike]] = None,
        **kwargs,
    ) -> "RestwireConfig":
        """Build a config from explicit values, falling back to the environment.

        ``RESTWIRE_BASE_URL`` and ``RESTWIRE_TIMEOUT`` are read after loading
        the ``.env`` file from the current directory, or from ``dotenv_path``.
        Values already set in the environment win over the file.

        Raises:
            BaseUrlMissingError: If no base URL is given or configured.
            ConfigurationError: If ``RESTWIRE_TIMEOUT`` is not a number.
        """
        load_dotenv(dotenv_path=dotenv_path or os.path.join(os.getcwd(), DOTENV_FILE))

        base_url = base_url or os.getenv(ENV_BASE_URL)
        if not base_url:
            raise BaseUrlMissingError()

        if timeout is None:
            raw_timeout = os.getenv(ENV_TIMEOUT)
            if raw_timeout:
                try:
                    timeout = float(raw_timeout)
                except ValueError as e:
                    raise ConfigurationError(
                        f"{ENV_TIMEOUT} must be a number of seconds, got '{raw_timeout}'."
                    ) from e

        return cls(base_url=base_url.rstrip("/"), timeout=timeout, **kwargs)
