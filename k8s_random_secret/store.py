"""Access to Secret objects through the Kubernetes API."""
import logging
from typing import Any, Dict, Optional

import kubernetes.client
import kubernetes.config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from .secret import SecretObject

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A get, create or patch call failed for a reason other than not-found."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class KubernetesSecretStore:
    """get/create/patch of namespaced Secrets over CoreV1Api."""

    def __init__(self, api: kubernetes.client.CoreV1Api):
        self.api = api

    @classmethod
    def from_cluster_config(cls) -> "KubernetesSecretStore":
        """Load in-cluster credentials, falling back to the local kubeconfig."""
        try:
            kubernetes.config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes configuration")
        except kubernetes.config.ConfigException:
            kubernetes.config.load_kube_config()
            logger.info("Loaded Kubernetes configuration from kubeconfig")
        return cls(kubernetes.client.CoreV1Api())

    def get(self, namespace: str, name: str) -> Optional[SecretObject]:
        """Return the Secret, or None if it does not exist."""
        try:
            secret = self.api.read_namespaced_secret(name, namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise StoreError(f"Error reading secret '{name}' in namespace '{namespace}': {e.reason}", e.status) from e
        except HTTPError as e:
            raise StoreError(f"Error reading secret '{name}' in namespace '{namespace}': {e}") from e
        return SecretObject.from_k8s(secret)

    def create(self, secret: SecretObject) -> None:
        try:
            self.api.create_namespaced_secret(namespace=secret.namespace, body=secret.to_k8s())
        except ApiException as e:
            raise StoreError(
                f"Error creating secret '{secret.name}' in namespace '{secret.namespace}': {e.reason}", e.status
            ) from e
        except HTTPError as e:
            raise StoreError(f"Error creating secret '{secret.name}' in namespace '{secret.namespace}': {e}") from e

    def patch(self, namespace: str, name: str, patch: Dict[str, Any]) -> None:
        """Apply a strategic merge patch; dict bodies are sent as strategic-merge-patch+json."""
        try:
            self.api.patch_namespaced_secret(name, namespace, patch)
        except ApiException as e:
            raise StoreError(f"Error patching secret '{name}' in namespace '{namespace}': {e.reason}", e.status) from e
        except HTTPError as e:
            raise StoreError(f"Error patching secret '{name}' in namespace '{namespace}': {e}") from e
