"""Node endpoint and polling configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .env import env_flag, env_number, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

if TYPE_CHECKING:
    import httpx

log = getLogger(__name__)

DEFAULT_MAX_NUMBER_OF_RETRIES = 5
DEFAULT_FREQUENCY_SECONDS = 5.0
DEFAULT_TIMEOUT_IN_SECONDS = 25.0
DEFAULT_NUMBER_OF_RESULTS = 2000
DEFAULT_SETTLE_DELAY_SECONDS = 0.5


@dataclass(frozen=True, slots=True)
class PollingConfig:
    """Client-wide defaults for operation and search polling.

    Each value can still be overridden per call.
    """

    max_number_of_retries: int = DEFAULT_MAX_NUMBER_OF_RETRIES
    frequency: float = DEFAULT_FREQUENCY_SECONDS
    timeout_in_seconds: float = DEFAULT_TIMEOUT_IN_SECONDS
    number_of_results: int = DEFAULT_NUMBER_OF_RESULTS
    settle_delay: float = DEFAULT_SETTLE_DELAY_SECONDS

    def __post_init__(self) -> None:
        for name in (
            "max_number_of_retries",
            "frequency",
            "timeout_in_seconds",
            "number_of_results",
            "settle_delay",
        ):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"Polling option {name} must be non-negative")


async def log_node_response(response: httpx.Response) -> None:
    request = response.request
    log.debug("%s %s -> %s", request.method, request.url, response.status_code)


@dataclass(frozen=True, slots=True)
class NodeConfig:
    endpoint: str
    port: int
    use_ssl: bool = False
    polling: PollingConfig = field(default_factory=PollingConfig)
    resilience: ResilienceConfig | None = None

    @property
    def base_url(self) -> str:
        host = self.endpoint.split("://", 1)[-1].rstrip("/")
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{host}:{self.port}"

    def resilience_config(self) -> ResilienceConfig:
        if self.resilience is not None:
            return self.resilience
        return ResilienceConfig(
            name="dkg-node",
            base_url=self.base_url,
            timeout_seconds=self.polling.timeout_in_seconds or DEFAULT_TIMEOUT_IN_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            response_hooks=(log_node_response,),
        )


def build_node_config(
    endpoint: str | None,
    port: int | str | None,
    *,
    use_ssl: bool | None = None,
    polling: PollingConfig | None = None,
    resilience: ResilienceConfig | None = None,
) -> NodeConfig:
    if not endpoint or not port:
        raise ConfigurationError("Endpoint and port are required parameters")
    try:
        port_number = int(port)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid node port: {port!r}") from exc
    if use_ssl is None:
        use_ssl = endpoint.startswith("https://")
    return NodeConfig(
        endpoint=endpoint,
        port=port_number,
        use_ssl=use_ssl,
        polling=polling or PollingConfig(),
        resilience=resilience,
    )


def get_polling_config() -> PollingConfig:
    return PollingConfig(
        max_number_of_retries=int(
            env_number("DKG_MAX_NUMBER_OF_RETRIES", default=DEFAULT_MAX_NUMBER_OF_RETRIES)
        ),
        frequency=env_number("DKG_FREQUENCY", default=DEFAULT_FREQUENCY_SECONDS),
        timeout_in_seconds=env_number("DKG_TIMEOUT_IN_SECONDS", default=DEFAULT_TIMEOUT_IN_SECONDS),
        number_of_results=int(
            env_number("DKG_NUMBER_OF_RESULTS", default=DEFAULT_NUMBER_OF_RESULTS)
        ),
    )


def get_node_config() -> NodeConfig:
    values = require_env_vars(("DKG_NODE_ENDPOINT", "DKG_NODE_PORT"))
    use_ssl: bool | None = None
    if optional_env_var("DKG_NODE_USE_SSL") is not None:
        use_ssl = env_flag("DKG_NODE_USE_SSL")
    return build_node_config(
        values["DKG_NODE_ENDPOINT"],
        values["DKG_NODE_PORT"],
        use_ssl=use_ssl,
        polling=get_polling_config(),
    )
