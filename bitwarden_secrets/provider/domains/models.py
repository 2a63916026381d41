"""Domain models for Bitwarden secrets and projects, plus the wire codec.

bws prints camelCase JSON; the models use snake_case. The mapping between the
two is a fixed table per entity, so decoding is total: a record either maps
every field or is rejected with DecodeError.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, TypeVar

from .errors import DecodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Secret:
    """A secret as known to Bitwarden Secrets Manager.

    value is sensitive and is left out of repr().
    """
    id: str = ""
    organization_id: str = ""
    project_id: str = ""
    key: str = ""
    value: str = field(default="", repr=False)
    note: str = ""
    creation_date: str = ""
    revision_date: str = ""

    WIRE_FIELDS = {
        "id": "id",
        "organization_id": "organizationId",
        "project_id": "projectId",
        "key": "key",
        "value": "value",
        "note": "note",
        "creation_date": "creationDate",
        "revision_date": "revisionDate",
    }
    SENSITIVE_FIELDS = frozenset({"value"})
    COMPUTED_FIELDS = frozenset({"id", "organization_id", "creation_date", "revision_date"})

    @classmethod
    def from_wire(cls, record: Dict[str, Any]) -> "Secret":
        return _from_wire(cls, record)

    def to_wire(self) -> Dict[str, str]:
        return _to_wire(self)


@dataclass
class Project:
    """A project grouping secrets in Bitwarden Secrets Manager."""
    id: str = ""
    organization_id: str = ""
    name: str = ""
    creation_date: str = ""
    revision_date: str = ""

    WIRE_FIELDS = {
        "id": "id",
        "organization_id": "organizationId",
        "name": "name",
        "creation_date": "creationDate",
        "revision_date": "revisionDate",
    }
    SENSITIVE_FIELDS = frozenset()
    COMPUTED_FIELDS = frozenset({"id", "organization_id", "creation_date", "revision_date"})

    @classmethod
    def from_wire(cls, record: Dict[str, Any]) -> "Project":
        return _from_wire(cls, record)

    def to_wire(self) -> Dict[str, str]:
        return _to_wire(self)


@dataclass
class SecretUpdate:
    """Sparse edit of a secret. None means leave the field unchanged."""
    key: Optional[str] = None
    value: Optional[str] = field(default=None, repr=False)
    note: Optional[str] = None
    project_id: Optional[str] = None

    @classmethod
    def from_plan(cls, plan: Secret) -> "SecretUpdate":
        """Build the edit for a planned secret.

        key and project_id are only sent when set. value and note are always
        part of a plan (note defaults to ""), so both are always sent.
        """
        return cls(
            key=plan.key or None,
            value=plan.value,
            note=plan.note or "",
            project_id=plan.project_id or None,
        )


@dataclass
class ProjectUpdate:
    """Sparse edit of a project. None means leave the field unchanged."""
    name: Optional[str] = None

    @classmethod
    def from_plan(cls, plan: Project) -> "ProjectUpdate":
        return cls(name=plan.name or None)


def _from_wire(model: Type[T], record: Dict[str, Any]) -> T:
    kind = model.__name__.lower()
    if not isinstance(record, dict):
        raise DecodeError(f"Expected a JSON object for {kind}, got {type(record).__name__}")

    values = {}
    for name, wire_name in model.WIRE_FIELDS.items():
        if wire_name not in record:
            raise DecodeError(f"{kind} record is missing field '{wire_name}'")
        item = record[wire_name]
        if not isinstance(item, str):
            # Never echo the value itself, it may be a secret
            raise DecodeError(f"{kind} field '{wire_name}' must be a string, got {type(item).__name__}")
        values[name] = item
    return model(**values)


def _to_wire(entity) -> Dict[str, str]:
    return {wire_name: getattr(entity, name) for name, wire_name in entity.WIRE_FIELDS.items()}


def _load_json(output: bytes, kind: str) -> Any:
    try:
        return json.loads(output)
    except (ValueError, TypeError) as e:
        # json error text quotes the document, which may contain secret values
        logger.debug(f"Failed to parse bws output for {kind}: {type(e).__name__}")
        raise DecodeError(f"Unable to unmarshal {kind} JSON from bws output") from None


def _decode_one(model: Type[T], output: bytes) -> T:
    return model.from_wire(_load_json(output, model.__name__.lower()))


def _decode_many(model: Type[T], output: bytes) -> List[T]:
    kind = model.__name__.lower()
    records = _load_json(output, f"{kind} list")
    if not isinstance(records, list):
        raise DecodeError(f"Expected a JSON array of {kind}s, got {type(records).__name__}")
    return [model.from_wire(record) for record in records]


def decode_secret(output: bytes) -> Secret:
    """Decode a single secret printed by bws."""
    return _decode_one(Secret, output)


def decode_project(output: bytes) -> Project:
    """Decode a single project printed by bws."""
    return _decode_one(Project, output)


def decode_secrets(output: bytes) -> List[Secret]:
    """Decode a JSON array of secrets, keeping bws ordering."""
    return _decode_many(Secret, output)


def decode_projects(output: bytes) -> List[Project]:
    """Decode a JSON array of projects, keeping bws ordering."""
    return _decode_many(Project, output)
