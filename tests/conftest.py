import logging

import pytest

from k8s_random_secret.config import Settings
from k8s_random_secret.store import StoreError


class FakeSecretStore:
    """In-memory store recording every call, with scripted failures."""

    def __init__(self, secrets=None):
        self.secrets = dict(secrets or {})
        self.calls = []
        self.failures = {"get": [], "create": [], "patch": []}

    def fail(self, operation, times=1, status=500):
        self.failures[operation].extend([status] * times)

    def _maybe_fail(self, operation):
        if self.failures[operation]:
            status = self.failures[operation].pop(0)
            raise StoreError(f"{operation} failed", status)

    def get(self, namespace, name):
        self.calls.append(("get", namespace, name))
        self._maybe_fail("get")
        return self.secrets.get((namespace, name))

    def create(self, secret):
        self.calls.append(("create", secret))
        self._maybe_fail("create")
        if (secret.namespace, secret.name) in self.secrets:
            raise StoreError("already exists", 409)
        self.secrets[(secret.namespace, secret.name)] = secret

    def patch(self, namespace, name, patch):
        self.calls.append(("patch", namespace, name, patch))
        self._maybe_fail("patch")
        current = self.secrets[(namespace, name)]
        metadata = patch.get("metadata", {})
        self.secrets[(namespace, name)] = current.with_changes(
            annotations=metadata.get("annotations"),
            string_data=patch.get("stringData"),
        )

    def writes(self):
        return [call for call in self.calls if call[0] in ("create", "patch")]


@pytest.fixture
def store():
    return FakeSecretStore()


@pytest.fixture
def settings():
    return Settings(namespace="ns1", name="db-pass", key="password")


@pytest.fixture
def logger():
    return logging.getLogger("tests")


@pytest.fixture
def sleeps():
    return []
