"""Create-or-patch reconciliation of a single generated Secret key."""
import enum
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from .config import Mode, Settings
from .generator import EntropyUnavailable, generate
from .patch import SerializationError, create_two_way_merge_patch, with_resource_version
from .secret import SecretObject, is_provisioned, new_secret, timestamp
from .store import StoreError

RETRYABLE_ERRORS = (StoreError, EntropyUnavailable, SerializationError)


class Outcome(enum.Enum):
    """Terminal state of a reconciliation run."""
    CREATED = "created"
    PATCHED = "patched"
    SKIPPED = "skipped"
    ABORTED = "aborted"


@dataclass(frozen=True)
class RetryState:
    """Failure and not-found wait counters, replaced rather than mutated."""
    failures: int = 0
    waits: int = 0

    def failed(self) -> "RetryState":
        return replace(self, failures=self.failures + 1)

    def waited(self) -> "RetryState":
        return replace(self, waits=self.waits + 1)


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a run with the counters it ended on and, when aborted, why."""
    outcome: Outcome
    state: RetryState
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is not Outcome.ABORTED


def _create(store, settings: Settings, now: Callable[[], str], logger) -> None:
    value = generate(settings.length, settings.encoding)
    secret = new_secret(settings.namespace, settings.name, settings.key, value,
                        annotation=settings.annotation, generated_at=now())
    store.create(secret)
    logger.info(f"Secret '{settings.name}' created in namespace '{settings.namespace}'")


def _patch(store, original: SecretObject, settings: Settings, now: Callable[[], str], logger) -> None:
    value = generate(settings.length, settings.encoding)
    desired = original.with_changes(
        annotations={settings.annotation: now()},
        string_data={settings.key: value},
    )
    patch = create_two_way_merge_patch(original, desired)
    store.patch(settings.namespace, settings.name, with_resource_version(patch, original.resource_version))
    logger.info(f"Secret '{settings.name}' patched in namespace '{settings.namespace}'")


def reconcile(
    store,
    settings: Settings,
    logger,
    sleep: Callable[[float], None] = time.sleep,
    now: Callable[[], str] = timestamp,
) -> ReconcileResult:
    """
    Drive the Secret to a provisioned state.

    Every attempt starts with a fresh read, so a retry after a failed write
    never patches against stale data and a write that succeeded despite a
    reported error is picked up as already provisioned.

    Args:
        store: object exposing get(namespace, name), create(secret) and
            patch(namespace, name, patch)
        settings: job settings
        logger: logger for progress and diagnostics
        sleep: called with the number of seconds to wait between attempts
        now: returns the timestamp written to the marker annotation

    Returns:
        ReconcileResult whose outcome is ABORTED once the failure or wait
        budget is exhausted
    """
    state = RetryState()

    while True:
        if state.failures >= settings.max_failures:
            logger.error(f"Unable to create/update secret '{settings.name}' after {state.failures} failed attempts")
            return ReconcileResult(Outcome.ABORTED, state, "retry budget exhausted")

        try:
            secret = store.get(settings.namespace, settings.name)

            if secret is None:
                if settings.mode is Mode.CREATE:
                    _create(store, settings, now, logger)
                    return ReconcileResult(Outcome.CREATED, state)

                if state.waits >= settings.max_waits:
                    logger.error(
                        f"Secret '{settings.name}' did not appear in namespace '{settings.namespace}' "
                        f"after {state.waits} checks"
                    )
                    return ReconcileResult(Outcome.ABORTED, state, "secret not found")
                state = state.waited()
                logger.warning(
                    f"Secret '{settings.name}' not found yet in namespace '{settings.namespace}', "
                    f"waiting {settings.wait_interval}s ({state.waits}/{settings.max_waits})"
                )
                sleep(settings.wait_interval)
                continue

            if is_provisioned(secret, settings.annotation):
                logger.info(f"Secret contains annotation '{settings.annotation}', exiting")
                return ReconcileResult(Outcome.SKIPPED, state)

            _patch(store, secret, settings, now, logger)
            return ReconcileResult(Outcome.PATCHED, state)

        except RETRYABLE_ERRORS as e:
            state = state.failed()
            logger.error(f"Attempt {state.failures}/{settings.max_failures} failed: {e}")
            if state.failures < settings.max_failures:
                sleep(state.failures * settings.backoff_seconds)
