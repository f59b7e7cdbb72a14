"""Job settings read from the process environment."""
import enum
from dataclasses import dataclass
from typing import Mapping

from .generator import Encoding
from .secret import DEFAULT_ANNOTATION

# Defaults
DEFAULT_LENGTH = 31
DEFAULT_MAX_FAILURES = 4
DEFAULT_BACKOFF_SECONDS = 2
DEFAULT_WAIT_INTERVAL = 10
DEFAULT_MAX_WAITS = 30

REQUIRED_VARIABLES = ("NAMESPACE", "SECRET_NAME", "SECRET_KEY")


class ConfigError(Exception):
    """Configuration error exception."""


class Mode(enum.Enum):
    """What to do when the Secret does not exist: create it, or wait for it."""
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class Settings:
    """Everything one provisioning run needs, read once at startup."""
    namespace: str
    name: str
    key: str
    mode: Mode = Mode.CREATE
    encoding: Encoding = Encoding.URL_SAFE
    length: int = DEFAULT_LENGTH
    annotation: str = DEFAULT_ANNOTATION
    max_failures: int = DEFAULT_MAX_FAILURES
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS
    wait_interval: float = DEFAULT_WAIT_INTERVAL
    max_waits: int = DEFAULT_MAX_WAITS


def _enum(environ: Mapping[str, str], variable: str, kind, default):
    raw = environ.get(variable)
    if not raw:
        return default
    try:
        return kind(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in kind)
        raise ConfigError(f"{variable} must be one of: {allowed} (got '{raw}')")


def _positive(environ: Mapping[str, str], variable: str, default, cast=int):
    raw = environ.get(variable)
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{variable} must be a number (got '{raw}')")
    if value <= 0:
        raise ConfigError(f"{variable} must be positive (got '{raw}')")
    return value


def load_settings(environ: Mapping[str, str]) -> Settings:
    """
    Build Settings from environment variables.

    Raises:
        ConfigError: if a required variable is unset or empty, or an
            optional one holds an invalid value
    """
    for variable in REQUIRED_VARIABLES:
        if not environ.get(variable):
            raise ConfigError(f"{variable} environment variable is not set")

    return Settings(
        namespace=environ["NAMESPACE"],
        name=environ["SECRET_NAME"],
        key=environ["SECRET_KEY"],
        mode=_enum(environ, "SECRET_MODE", Mode, Mode.CREATE),
        encoding=_enum(environ, "SECRET_ENCODING", Encoding, Encoding.URL_SAFE),
        length=_positive(environ, "SECRET_LENGTH", DEFAULT_LENGTH),
        annotation=environ.get("SECRET_ANNOTATION") or DEFAULT_ANNOTATION,
        max_failures=_positive(environ, "MAX_FAILURES", DEFAULT_MAX_FAILURES),
        backoff_seconds=_positive(environ, "BACKOFF_SECONDS", DEFAULT_BACKOFF_SECONDS, float),
        wait_interval=_positive(environ, "WAIT_INTERVAL", DEFAULT_WAIT_INTERVAL, float),
        max_waits=_positive(environ, "MAX_WAITS", DEFAULT_MAX_WAITS),
    )
