"""Managed resources: create, read, update, delete and import secrets and projects.

Each operation is an independent transition. It takes a plan or the prior
state, runs one bws command and returns the decoded entity in full. Any
failure raises a ProviderError before anything is returned, so the caller never
sees partial state.
"""
import logging
from typing import List, Optional

from ..domains.bws_client import BwsClient
from ..domains.errors import ConfigurationError, ValidationError
from ..domains.models import (
    Project,
    ProjectUpdate,
    Secret,
    SecretUpdate,
    decode_project,
    decode_secret,
)

logger = logging.getLogger(__name__)


def build_secret_create_args(plan: Secret) -> List[str]:
    return ["secret", "create", "--note", plan.note or "", plan.key, plan.value, plan.project_id]


def build_secret_edit_args(update: SecretUpdate, secret_id: str) -> List[str]:
    """
    Build `secret edit` arguments from a sparse update.

    Only fields present on the update become flags. The secret id is always
    the final positional argument.
    """
    args = ["secret", "edit"]
    if update.key:
        args.extend(["--key", update.key])
    if update.value is not None:
        args.extend(["--value", update.value])
    if update.note is not None:
        args.extend(["--note", update.note])
    if update.project_id:
        args.extend(["--project-id", update.project_id])
    args.append(secret_id)
    return args


def build_project_create_args(plan: Project) -> List[str]:
    return ["project", "create", plan.name]


def build_project_edit_args(update: ProjectUpdate, project_id: str) -> List[str]:
    """Build `project edit` arguments; the project id is always last."""
    args = ["project", "edit"]
    if update.name:
        args.extend(["--name", update.name])
    args.append(project_id)
    return args


def require_field(value: str, label: str) -> None:
    if not value:
        raise ValidationError(f"{label} must be provided", summary=f"{label} is required")


class BwsBacked:
    """Shared wiring for resources and data sources backed by a BwsClient."""

    type_suffix = ""
    configure_kind = "Resource"

    def __init__(self, client: Optional[BwsClient] = None):
        self._client = client

    def metadata(self, provider_type_name: str) -> str:
        return f"{provider_type_name}_{self.type_suffix}"

    def configure(self, client: BwsClient) -> None:
        """Attach the session client, replacing any previous one."""
        if not isinstance(client, BwsClient):
            raise ConfigurationError(
                f"Expected BwsClient, got: {type(client).__name__}. "
                "Please report this issue to the provider developers.",
                summary=f"Unexpected {self.configure_kind} Configure Type",
            )
        self._client = client

    @property
    def client(self) -> BwsClient:
        if self._client is None:
            raise ConfigurationError(
                f"{type(self).__name__} has no bws client. Build it from a configured ProviderSession.",
                summary="Provider not configured",
            )
        return self._client

    @staticmethod
    def _warn_computed(plan) -> None:
        supplied = sorted(name for name in type(plan).COMPUTED_FIELDS if getattr(plan, name))
        if supplied:
            logger.debug(f"Ignoring computed fields in plan: {', '.join(supplied)}")


class SecretResource(BwsBacked):
    """Bitwarden secret managed through `bws secret`."""

    type_suffix = "secret"

    def create(self, plan: Secret) -> Secret:
        """
        Create a secret from a plan.

        Args:
            plan: Desired secret; project_id and key are required

        Returns:
            The secret as stored by Bitwarden, including id and computed fields

        Raises:
            ValidationError: project_id or key is empty (bws is not called)
            ExecutionError: bws failed
            DecodeError: bws output was not a secret
        """
        require_field(plan.project_id, "Project ID")
        require_field(plan.key, "Key")
        self._warn_computed(plan)

        secret = decode_secret(self.client.execute(build_secret_create_args(plan)))
        logger.info(f"Created secret {secret.id} in project {secret.project_id}")
        return secret

    def read(self, prior: Secret) -> Secret:
        """Refresh a secret from Bitwarden using only the prior state's id."""
        require_field(prior.id, "Secret ID")
        return decode_secret(self.client.execute(["secret", "get", prior.id]))

    def update(self, plan: Secret) -> Secret:
        """Apply a plan to an existing secret and return the new state."""
        require_field(plan.id, "Secret ID")
        args = build_secret_edit_args(SecretUpdate.from_plan(plan), plan.id)
        secret = decode_secret(self.client.execute(args))
        logger.info(f"Updated secret {secret.id}")
        return secret

    def delete(self, prior: Secret) -> None:
        """Delete a secret. A missing id surfaces the bws error."""
        require_field(prior.id, "Secret ID")
        self.client.execute(["secret", "delete", prior.id])
        logger.info(f"Deleted secret {prior.id}")

    def import_state(self, secret_id: str) -> Secret:
        """Start tracking an existing secret; follow with read()."""
        return Secret(id=secret_id)


class ProjectResource(BwsBacked):
    """Bitwarden project managed through `bws project`."""

    type_suffix = "project"

    def create(self, plan: Project) -> Project:
        require_field(plan.name, "Name")
        self._warn_computed(plan)

        project = decode_project(self.client.execute(build_project_create_args(plan)))
        logger.info(f"Created project {project.id}")
        return project

    def read(self, prior: Project) -> Project:
        require_field(prior.id, "Project ID")
        return decode_project(self.client.execute(["project", "get", prior.id]))

    def update(self, plan: Project) -> Project:
        require_field(plan.id, "Project ID")
        require_field(plan.name, "Name")
        args = build_project_edit_args(ProjectUpdate.from_plan(plan), plan.id)
        project = decode_project(self.client.execute(args))
        logger.info(f"Updated project {project.id}")
        return project

    def delete(self, prior: Project) -> None:
        require_field(prior.id, "Project ID")
        self.client.execute(["project", "delete", prior.id])
        logger.info(f"Deleted project {prior.id}")

    def import_state(self, project_id: str) -> Project:
        return Project(id=project_id)
