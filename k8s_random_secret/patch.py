"""Two-way strategic merge patch synthesis for Secret objects.

Every field of the Secret schema modelled here is either a scalar or a
string map, for which the strategic merge dialect reduces to: changed keys
carry their new value, removed keys carry ``null`` and unchanged keys are
omitted. Lists are replaced atomically.
"""
import copy
import json
from typing import Any, Dict, Optional

from .secret import SecretObject


class SerializationError(Exception):
    """An object could not be rendered to its canonical JSON form."""


def _canonical(secret: SecretObject) -> Dict[str, Any]:
    try:
        return json.loads(json.dumps(secret.to_manifest(), sort_keys=True))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Unable to serialize Secret '{secret.name}': {e}") from e


def _diff_maps(original: Dict[str, Any], modified: Dict[str, Any]) -> Dict[str, Any]:
    patch: Dict[str, Any] = {}
    for key, value in modified.items():
        if key not in original:
            patch[key] = value
            continue
        old = original[key]
        if isinstance(old, dict) and isinstance(value, dict):
            nested = _diff_maps(old, value)
            if nested:
                patch[key] = nested
        elif old != value:
            patch[key] = value
    for key in original:
        if key not in modified:
            patch[key] = None
    return patch


def create_two_way_merge_patch(original: SecretObject, modified: SecretObject) -> Dict[str, Any]:
    """Return a patch taking ``original`` to ``modified`` and touching nothing else."""
    return _diff_maps(_canonical(original), _canonical(modified))


def with_resource_version(patch: Dict[str, Any], resource_version: Optional[str]) -> Dict[str, Any]:
    """
    Make a patch conditional on the object still being at ``resource_version``.

    The API server answers 409 Conflict when the stored object has moved on,
    so a patch synthesised from stale data is never applied. Empty patches
    and unknown versions are returned unchanged.
    """
    if not patch or not resource_version:
        return patch
    conditional = copy.deepcopy(patch)
    conditional.setdefault("metadata", {})["resourceVersion"] = resource_version
    return conditional
