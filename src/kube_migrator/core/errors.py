"""Exception hierarchy for migration failures."""

from __future__ import annotations


class MigrationError(Exception):
    """Base class for every error raised by the migration engine.

    When a migration run aborts, the orchestrator attaches the partial
    MigrationReport as ``report``.
    """

    report = None


class ConfigurationError(MigrationError):
    pass


class CredentialError(MigrationError):
    """A kube-config could not be read or does not describe a usable cluster."""


class SnapshotLoadError(MigrationError):
    def __init__(self, cluster: str, kind: str, reason: str):
        super().__init__(f"Could not list {kind} in cluster '{cluster}': {reason}")
        self.cluster = cluster
        self.kind = kind
        self.reason = reason


class MissingIdentityError(MigrationError):
    """A resource lacks the metadata fields its identity is derived from."""


class UnsupportedKindError(MigrationError):
    pass


class ManifestError(MigrationError):
    """A manifest could not be fetched, parsed or converted."""


class EntrypointUnresolvedError(MigrationError):
    pass


class ProxyDeployError(MigrationError):
    pass
