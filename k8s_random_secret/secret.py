"""Immutable snapshot of a Kubernetes Secret and the provisioning guard."""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import kubernetes.client

DEFAULT_ANNOTATION = "secret-generation-time"


def timestamp() -> str:
    """Current UTC time in ISO-8601, used as the marker annotation value."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class SecretObject:
    """
    The parts of a Secret this job reads and writes.

    ``data`` holds base64 values exactly as the API server returns them;
    ``string_data`` holds plaintext values to be written. Missing mappings
    are normalised to empty dicts so comparison never sees None.
    """
    namespace: str
    name: str
    annotations: Dict[str, str] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)
    data: Dict[str, str] = field(default_factory=dict)
    string_data: Dict[str, str] = field(default_factory=dict)
    type: Optional[str] = None
    resource_version: Optional[str] = None

    def __post_init__(self):
        for name in ("annotations", "labels", "data", "string_data"):
            object.__setattr__(self, name, dict(getattr(self, name) or {}))

    @classmethod
    def from_k8s(cls, secret: kubernetes.client.V1Secret) -> "SecretObject":
        metadata = secret.metadata or kubernetes.client.V1ObjectMeta()
        return cls(
            namespace=metadata.namespace,
            name=metadata.name,
            annotations=metadata.annotations,
            labels=metadata.labels,
            data=secret.data,
            string_data=secret.string_data,
            type=secret.type,
            resource_version=metadata.resource_version,
        )

    def to_k8s(self) -> kubernetes.client.V1Secret:
        return kubernetes.client.V1Secret(
            metadata=kubernetes.client.V1ObjectMeta(
                name=self.name,
                namespace=self.namespace,
                annotations=dict(self.annotations) or None,
                labels=dict(self.labels) or None,
            ),
            type=self.type,
            data=dict(self.data) or None,
            string_data=dict(self.string_data) or None,
        )

    def to_manifest(self) -> Dict[str, Any]:
        """Canonical JSON-shaped representation used for patch synthesis."""
        manifest: Dict[str, Any] = {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "annotations": dict(self.annotations),
                "labels": dict(self.labels),
            },
            "data": dict(self.data),
            "stringData": dict(self.string_data),
        }
        if self.type is not None:
            manifest["type"] = self.type
        return manifest

    def with_changes(
        self,
        annotations: Optional[Mapping[str, str]] = None,
        string_data: Optional[Mapping[str, str]] = None,
    ) -> "SecretObject":
        """Return a new snapshot with the given entries merged in."""
        return replace(
            self,
            annotations={**self.annotations, **(annotations or {})},
            string_data={**self.string_data, **(string_data or {})},
        )


def is_provisioned(secret: SecretObject, annotation: str = DEFAULT_ANNOTATION) -> bool:
    """Check if the Secret already carries the provisioning marker."""
    return annotation in secret.annotations


def new_secret(namespace: str, name: str, key: str, value: str,
               annotation: str = DEFAULT_ANNOTATION, generated_at: Optional[str] = None) -> SecretObject:
    """Build a fresh Secret carrying the marker and a single generated entry."""
    return SecretObject(
        namespace=namespace,
        name=name,
        annotations={annotation: generated_at or timestamp()},
        string_data={key: value},
        type="Opaque",
    )
