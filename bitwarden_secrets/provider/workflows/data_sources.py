"""Read-only lookups of secrets and projects."""
import logging
from typing import List

from ..domains.models import Project, Secret, decode_project, decode_projects, decode_secret, decode_secrets
from .resources import BwsBacked, require_field

logger = logging.getLogger(__name__)


class SecretDataSource(BwsBacked):
    """Single secret looked up by id."""

    type_suffix = "secret"
    configure_kind = "Data Source"

    def read_one(self, secret_id: str) -> Secret:
        require_field(secret_id, "Secret ID")
        secret = decode_secret(self.client.execute(["secret", "get", secret_id]))
        logger.debug(f"Fetched secret {secret.id} from Bitwarden Secrets CLI")
        return secret


class ProjectDataSource(BwsBacked):
    """Single project looked up by id."""

    type_suffix = "project"
    configure_kind = "Data Source"

    def read_one(self, project_id: str) -> Project:
        require_field(project_id, "Project ID")
        project = decode_project(self.client.execute(["project", "get", project_id]))
        logger.debug(f"Fetched project {project.id} from Bitwarden Secrets CLI")
        return project


class SecretListDataSource(BwsBacked):
    """All secrets visible to the access token, in the order bws prints them."""

    type_suffix = "secret_list"
    configure_kind = "Data Source"

    def read_all(self) -> List[Secret]:
        secrets = decode_secrets(self.client.execute(["list", "secrets"]))
        logger.debug(f"Fetched {len(secrets)} secrets from Bitwarden Secrets CLI")
        return secrets


class ProjectListDataSource(BwsBacked):
    """All projects visible to the access token, in the order bws prints them."""

    type_suffix = "project_list"
    configure_kind = "Data Source"

    def read_all(self) -> List[Project]:
        projects = decode_projects(self.client.execute(["list", "projects"]))
        logger.debug(f"Fetched {len(projects)} projects from Bitwarden Secrets CLI")
        return projects
