"""Provider session: owns the bws client and hands it to every resource.

A session is built once from configuration. The client it holds is passed by
constructor to each resource and data source, so there is no shared module
state and each session can point at a different server or token.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..domains.bws_client import BwsClient
from ..domains.config_loader import load_config
from ..domains.errors import ConfigurationError, Diagnostic, ProviderError
from .data_sources import ProjectDataSource, ProjectListDataSource, SecretDataSource, SecretListDataSource
from .resources import ProjectResource, SecretResource

logger = logging.getLogger(__name__)

PROVIDER_TYPE_NAME = "bitwarden-secrets"
VERSION = "0.1.0"

RESOURCE_TYPES = (SecretResource, ProjectResource)
DATA_SOURCE_TYPES = (SecretDataSource, ProjectDataSource, SecretListDataSource, ProjectListDataSource)


class ProviderSession:
    """Configured provider for one orchestrator session."""

    def __init__(self, client: BwsClient, version: str = VERSION):
        if not isinstance(client, BwsClient):
            raise ConfigurationError(f"Expected BwsClient, got: {type(client).__name__}")
        self.client = client
        self.version = version

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "ProviderSession":
        """
        Build a session from a loaded config.

        Args:
            config: Result of load_config(); loaded from disk when omitted

        Raises:
            ConfigurationError: If the access token is missing or config is invalid
        """
        if config is None:
            config = load_config()

        access_token = config.get("access_token")
        if not access_token:
            raise ConfigurationError("Access token is required to configure the provider")

        client = BwsClient(
            access_token=access_token,
            server_url=config.get("server_url") or None,
            binary=config.get("binary") or "bws",
            timeout=config.get("timeout"),
        )
        logger.debug(f"Configured provider session with {client!r}")
        return cls(client)

    def metadata(self) -> Dict[str, str]:
        return {"type_name": PROVIDER_TYPE_NAME, "version": self.version}

    def resources(self) -> List[Any]:
        return [resource_type(self.client) for resource_type in RESOURCE_TYPES]

    def data_sources(self) -> List[Any]:
        return [data_source_type(self.client) for data_source_type in DATA_SOURCE_TYPES]

    def secret_resource(self) -> SecretResource:
        return SecretResource(self.client)

    def project_resource(self) -> ProjectResource:
        return ProjectResource(self.client)

    def secret_data_source(self) -> SecretDataSource:
        return SecretDataSource(self.client)

    def project_data_source(self) -> ProjectDataSource:
        return ProjectDataSource(self.client)

    def secret_list_data_source(self) -> SecretListDataSource:
        return SecretListDataSource(self.client)

    def project_list_data_source(self) -> ProjectListDataSource:
        return ProjectListDataSource(self.client)


def run_operation(operation: Callable[..., Any], *args: Any) -> Tuple[Any, List[Diagnostic]]:
    """
    Run one provider operation and collect its diagnostics.

    Returns:
        (result, []) on success, (None, [diagnostic]) if a ProviderError was raised
    """
    try:
        return operation(*args), []
    except ProviderError as e:
        logger.debug(f"{getattr(operation, '__qualname__', operation)} failed: {e.category}")
        return None, [e.to_diagnostic()]
