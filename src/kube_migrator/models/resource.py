"""Resource records shared by typed and custom kinds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kube_migrator.core.errors import MissingIdentityError
from kube_migrator.models.kinds import ResourceKind


@dataclass(frozen=True)
class KubeResource:
    """A resource as a plain attribute mapping tagged with its kind.

    Accessors for the fields the engine depends on (name, namespace)
    raise MissingIdentityError instead of returning a default, so a
    malformed record can never silently compare equal to another one.
    """

    kind: ResourceKind
    raw: dict[str, Any]

    @property
    def metadata(self) -> dict[str, Any]:
        meta = self.raw.get("metadata")
        if not isinstance(meta, dict):
            raise MissingIdentityError(f"{self.kind.name} resource has no metadata block")
        return meta

    @property
    def name(self) -> str:
        name = self.metadata.get("name")
        if not name:
            raise MissingIdentityError(f"{self.kind.name} resource has no metadata.name")
        return name

    @property
    def namespace(self) -> str:
        if self.kind.cluster_scoped:
            return ""
        namespace = self.metadata.get("namespace")
        if not namespace:
            raise MissingIdentityError(
                f"{self.kind.name} '{self.metadata.get('name', '?')}' has no metadata.namespace"
            )
        return namespace

    @property
    def identity(self) -> str:
        if self.kind.cluster_scoped:
            return self.name
        return f"{self.namespace}:{self.name}"

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.get("labels") or {}

    @property
    def annotations(self) -> dict[str, str]:
        return self.metadata.get("annotations") or {}

    @property
    def spec(self) -> Any:
        return self.raw.get("spec")

    @property
    def status(self) -> dict[str, Any]:
        return self.raw.get("status") or {}

    def display_name(self) -> str:
        """Identity for log lines; never raises."""
        meta = self.raw.get("metadata") or {}
        name = meta.get("name", "?")
        namespace = meta.get("namespace", "")
        return f"{namespace}/{name}" if namespace else name
