"""Building and applying the ephemeral container patch."""

import random
import string
from typing import Any, Iterable

from podwand.errors import ConnectivityError, PatchRejectedError, ValidationError
from podwand.pods import ClusterAPI, error_detail
from podwand.types import ContainerSnapshot, EphemeralContainerSpec, PodRef
from podwand.ui import print_debug, print_document

NAME_PREFIX = "debugger-"
NAME_SUFFIX_LENGTH = 5

ROOT_SECURITY_CONTEXT = {"runAsNonRoot": False, "runAsUser": 0}


def generate_name(existing: Iterable[str] = ()) -> str:
    """Random `debugger-xxxxx` name not already used by a container in the pod."""
    taken = set(existing)
    while True:
        suffix = "".join(
            random.choices(string.ascii_lowercase, k=NAME_SUFFIX_LENGTH)
        )
        name = f"{NAME_PREFIX}{suffix}"
        if name not in taken:
            return name
        print_debug(f"Generated name {name} is taken, retrying")


def build(
    target: ContainerSnapshot,
    image: str,
    command: list[str],
    use_root: bool,
    existing_names: Iterable[str] = (),
) -> EphemeralContainerSpec:
    """Build the ephemeral container for debugging `target`.

    Mounts are copied from the target so the debugger sees the same files.
    With `use_root` the security context is forced to root; otherwise the
    target's context (or its absence) is inherited so that shared-namespace
    tooling such as ptrace is not refused by a stricter default.
    """
    if not image:
        raise ValidationError("An image is required for the debug container.")
    if not command:
        raise ValidationError("A command is required for the debug container.")

    if use_root:
        security_context = dict(ROOT_SECURITY_CONTEXT)
    elif target.security_context is not None:
        security_context = dict(target.security_context)
    else:
        security_context = None

    return EphemeralContainerSpec(
        name=generate_name(existing_names),
        image=image,
        command=list(command),
        target_container_name=target.name,
        volume_mounts=[m for m in target.volume_mounts if not m.has_sub_path],
        security_context=security_context,
    )


def build_patch(spec: EphemeralContainerSpec) -> dict[str, Any]:
    return {"spec": {"ephemeralContainers": [spec.to_dict()]}}


def apply_patch(api: ClusterAPI, pod: PodRef, spec: EphemeralContainerSpec) -> str:
    """Send the patch once and return the new container's name.

    Ephemeral containers cannot be removed or changed once added, so a failed
    patch is never retried.
    """
    patch = build_patch(spec)
    print_document("Ephemeral container patch", patch)

    try:
        response = api.patch_ephemeral_containers(pod, patch)
    except ConnectivityError as e:
        raise ConnectivityError(str(e), patch=patch) from e

    if not response.is_success:
        raise PatchRejectedError(response.status_code, error_detail(response), patch)

    return spec.name
