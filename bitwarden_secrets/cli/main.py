"""CLI entrypoint for bitwarden-secrets-provider."""
import sys
import json
import argparse
import logging
from dataclasses import asdict
from pathlib import Path

from bitwarden_secrets.provider.domains.errors import ProviderError
from bitwarden_secrets.provider.domains.models import Project, Secret
from bitwarden_secrets.provider.workflows.provider import ProviderSession, VERSION

from .validators import validate_identifier, validate_required_text

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr
    )


def _session() -> ProviderSession:
    """Build a provider session from the current config file."""
    return ProviderSession.from_config()


def _as_output(entity, reveal: bool) -> dict:
    data = asdict(entity)
    if not reveal:
        for name in type(entity).SENSITIVE_FIELDS:
            data[name] = "********"
    return data


def _print_entity(entity, reveal: bool = False) -> None:
    print(json.dumps(_as_output(entity, reveal), indent=2))


def _print_entities(entities, reveal: bool = False) -> None:
    print(json.dumps([_as_output(entity, reveal) for entity in entities], indent=2))


def cmd_version(args):
    """Show version information."""
    print(f"bitwarden-secrets-provider {VERSION}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from bitwarden_secrets.provider.domains.config_loader import set_config_path_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_config_path_preference(str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path."""
    from bitwarden_secrets.provider.domains.config_loader import default_config_path, get_config_path_preference

    config_path_pref = get_config_path_preference()

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        print("Source: default" if default_config.exists() else "Source: default (file not found)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from bitwarden_secrets.provider.domains.config_loader import clear_config_path_preference, default_config_path

    clear_config_path_preference()
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def cmd_secret_get(args):
    """Fetch one secret by id."""
    validate_identifier(args.secret_id, "Secret ID")
    secret = _session().secret_data_source().read_one(args.secret_id)
    _print_entity(secret, reveal=args.reveal)


def cmd_secret_list(args):
    """List all secrets visible to the access token."""
    secrets = _session().secret_list_data_source().read_all()
    _print_entities(secrets, reveal=args.reveal)


def cmd_secret_create(args):
    """Create a secret."""
    validate_identifier(args.project_id, "Project ID")
    validate_required_text(args.key, "Key")
    plan = Secret(project_id=args.project_id, key=args.key, value=args.value, note=args.note or "")
    secret = _session().secret_resource().create(plan)
    _print_entity(secret)


def cmd_secret_edit(args):
    """Edit a secret. Omitted key and project id are left unchanged."""
    validate_identifier(args.secret_id, "Secret ID")
    plan = Secret(
        id=args.secret_id,
        project_id=args.project_id or "",
        key=args.key or "",
        value=args.value,
        note=args.note or "",
    )
    secret = _session().secret_resource().update(plan)
    _print_entity(secret)


def cmd_secret_delete(args):
    """Delete a secret."""
    validate_identifier(args.secret_id, "Secret ID")
    _session().secret_resource().delete(Secret(id=args.secret_id))
    print(f"Deleted secret {args.secret_id}")


def cmd_project_get(args):
    """Fetch one project by id."""
    validate_identifier(args.project_id, "Project ID")
    _print_entity(_session().project_data_source().read_one(args.project_id))


def cmd_project_list(args):
    """List all projects visible to the access token."""
    _print_entities(_session().project_list_data_source().read_all())


def cmd_project_create(args):
    """Create a project."""
    validate_required_text(args.name, "Name")
    _print_entity(_session().project_resource().create(Project(name=args.name)))


def cmd_project_edit(args):
    """Rename a project."""
    validate_identifier(args.project_id, "Project ID")
    validate_required_text(args.name, "Name")
    _print_entity(_session().project_resource().update(Project(id=args.project_id, name=args.name)))


def cmd_project_delete(args):
    """Delete a project."""
    validate_identifier(args.project_id, "Project ID")
    _session().project_resource().delete(Project(id=args.project_id))
    print(f"Deleted project {args.project_id}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bws-provider",
        description="Manage Bitwarden Secrets Manager secrets and projects through the bws CLI",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (bws failure, bad config, unexpected output, etc.)
  2 - Usage error (invalid arguments, empty required fields, etc.)

Environment variables:
  BWS_ACCESS_TOKEN - Access token (overrides config file)
  BWS_SERVER_URL   - Bitwarden server URL (overrides config file)

Configuration:
  Default location: ~/.config/bitwarden-secrets-provider/config.yml
  Custom path: Set with 'bws-provider config set-path <path>'
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("version", help="Show version information")

    # config command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to your config file in preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")
    config_subparsers.add_parser("show", help="Show current config path")
    config_subparsers.add_parser("clear", help="Clear config path preference")

    # secret command
    secret_parser = subparsers.add_parser("secret", help="Secret operations")
    secret_subparsers = secret_parser.add_subparsers(dest="secret_command")

    secret_get_parser = secret_subparsers.add_parser("get", help="Get a secret by id")
    secret_get_parser.add_argument("secret_id", help="Secret identifier")
    secret_get_parser.add_argument("--reveal", action="store_true", help="Print the secret value instead of a mask")

    secret_list_parser = secret_subparsers.add_parser("list", help="List secrets")
    secret_list_parser.add_argument("--reveal", action="store_true", help="Print secret values instead of masks")

    secret_create_parser = secret_subparsers.add_parser("create", help="Create a secret")
    secret_create_parser.add_argument("--project-id", required=True, help="Project the secret belongs to")
    secret_create_parser.add_argument("--key", required=True, help="Secret key")
    secret_create_parser.add_argument("--value", required=True, help="Secret value")
    secret_create_parser.add_argument("--note", default="", help="Optional note")

    secret_edit_parser = secret_subparsers.add_parser(
        "edit",
        help="Edit a secret",
        description="""
Edit a secret. --value is always sent. --note is always sent and defaults to
an empty note. --key and --project-id are only changed when given.
        """
    )
    secret_edit_parser.add_argument("secret_id", help="Secret identifier")
    secret_edit_parser.add_argument("--key", help="New key")
    secret_edit_parser.add_argument("--value", required=True, help="New value")
    secret_edit_parser.add_argument("--note", default="", help="New note")
    secret_edit_parser.add_argument("--project-id", help="Move the secret to another project")

    secret_delete_parser = secret_subparsers.add_parser("delete", help="Delete a secret")
    secret_delete_parser.add_argument("secret_id", help="Secret identifier")

    # project command
    project_parser = subparsers.add_parser("project", help="Project operations")
    project_subparsers = project_parser.add_subparsers(dest="project_command")

    project_get_parser = project_subparsers.add_parser("get", help="Get a project by id")
    project_get_parser.add_argument("project_id", help="Project identifier")

    project_subparsers.add_parser("list", help="List projects")

    project_create_parser = project_subparsers.add_parser("create", help="Create a project")
    project_create_parser.add_argument("name", help="Project name")

    project_edit_parser = project_subparsers.add_parser("edit", help="Rename a project")
    project_edit_parser.add_argument("project_id", help="Project identifier")
    project_edit_parser.add_argument("--name", required=True, help="New project name")

    project_delete_parser = project_subparsers.add_parser("delete", help="Delete a project")
    project_delete_parser.add_argument("project_id", help="Project identifier")

    return parser


COMMANDS = {
    ("version", None): cmd_version,
    ("config", "set-path"): cmd_config_set_path,
    ("config", "show"): cmd_config_show,
    ("config", "clear"): cmd_config_clear,
    ("secret", "get"): cmd_secret_get,
    ("secret", "list"): cmd_secret_list,
    ("secret", "create"): cmd_secret_create,
    ("secret", "edit"): cmd_secret_edit,
    ("secret", "delete"): cmd_secret_delete,
    ("project", "get"): cmd_project_get,
    ("project", "list"): cmd_project_list,
    ("project", "create"): cmd_project_create,
    ("project", "edit"): cmd_project_edit,
    ("project", "delete"): cmd_project_delete,
}


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (bws failure, config errors, decode errors)
        2 - Usage errors (invalid arguments, empty required fields)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    subcommand = getattr(args, f"{args.command}_command", None)
    handler = COMMANDS.get((args.command, subcommand))
    if handler is None:
        parser.print_help()
        sys.exit(2)

    try:
        handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except ProviderError as e:
        print(f"Error: {e.category}: {e.detail}", file=sys.stderr)
        sys.exit(2 if e.category == "validation" else 1)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
