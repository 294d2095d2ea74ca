from decouple import config
from pathlib import Path

# Remote Server Configuration
SERVER_URL = config('REMOTE_YT_URL', default='http://localhost:8080')
REQUEST_TIMEOUT = config('REMOTE_YT_REQUEST_TIMEOUT', default=5.0, cast=float)


def _validate_interval(value: int) -> int:
    """Clamp the poll interval to something the server can keep up with.

    Args:
        value: Interval in milliseconds

    Returns:
        Interval in milliseconds, at least 100

    Examples:
        >>> _validate_interval(1000)
        1000
        >>> _validate_interval(10)
        100
    """
    return max(100, value)


# Polling Configuration
POLL_INTERVAL_MS = _validate_interval(config('REMOTE_YT_POLL_INTERVAL_MS', default=1000, cast=int))
POLL_INTERVAL = POLL_INTERVAL_MS / 1000
OFFLINE_AFTER_FAILURES = max(1, config('REMOTE_YT_OFFLINE_AFTER', default=4, cast=int))

# Enqueue Configuration
DEFAULT_QUALITY = config('REMOTE_YT_DEFAULT_QUALITY', default='hd_s')
HISTORY_DEFAULT_HEIGHT = 720

# Logging Configuration
LOG_LEVEL = config('REMOTE_YT_LOG_LEVEL', default='INFO')
LOG_FILE = config('REMOTE_YT_LOG_FILE', default=None)


def get_version():
    """Get version from pyproject.toml"""
    import tomllib

    pyproject_path = Path(__file__).parent / "pyproject.toml"
    if pyproject_path.exists():
        with open(pyproject_path, 'rb') as f:
            data = tomllib.load(f)
            return data.get("project", {}).get("version", "unknown")
    return "unknown"


__version__ = get_version()

# Test Configuration
TEST_TIMEOUT = config('TEST_TIMEOUT', default=0.5, cast=float)
