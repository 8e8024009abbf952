from importlib.metadata import PackageNotFoundError, version

from .constants import USER_AGENT_PREFIX


def user_agent_value(component: str = "") -> str:
    """Build the User-Agent header value sent by the bundled transport."""
    try:
        package_version = version("restwire")
    except PackageNotFoundError:
        package_version = "0.0.0"

    if component:
        return f"{USER_AGENT_PREFIX}/{component}/{package_version}"
    return f"{USER_AGENT_PREFIX}/{package_version}"
