"""
Pod classification rules deciding whether a pod is skipped or evicted during a drain.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from enum import Enum

from kubernetes import client as k8s

from nodedrain.drain.models import DrainRequest, PodAction

MIRROR_POD_ANNOTATION = "kubernetes.io/config.mirror"
COMPLETED_PHASES = {"Succeeded", "Failed"}


class Classification(Enum):
    """Drain disposition of a pod."""

    COMPLETED = "completed"
    SKIPPED_MIRROR = "skipped_mirror"
    SKIPPED_DAEMONSET = "skipped_daemonset"
    SKIPPED_LOCAL_DATA = "skipped_local_data"
    EVICT = "evict"

    @property
    def skip_action(self) -> PodAction | None:
        """Outcome recorded for a skipped pod, None if the pod is not skipped."""
        match self:
            case Classification.SKIPPED_MIRROR:
                return PodAction.SKIPPED_MIRROR
            case Classification.SKIPPED_DAEMONSET:
                return PodAction.SKIPPED_DAEMONSET
            case Classification.SKIPPED_LOCAL_DATA:
                return PodAction.SKIPPED_LOCAL_DATA
            case _:
                return None


def classify_pod(pod: k8s.V1Pod, request: DrainRequest) -> Classification:
    """Decide what a drain does with a pod. The first matching rule wins.

    :param pod: Kubernetes pod object
    :param request: Drain request
    :return: Classification of the pod
    """
    if is_completed_pod(pod):
        return Classification.COMPLETED
    if is_mirror_pod(pod):
        return Classification.SKIPPED_MIRROR
    if request.ignore_daemonsets and is_daemonset_pod(pod):
        return Classification.SKIPPED_DAEMONSET
    if has_local_data(pod) and not request.delete_local_data and not request.force:
        return Classification.SKIPPED_LOCAL_DATA
    return Classification.EVICT


def is_completed_pod(pod: k8s.V1Pod) -> bool:
    """Check if pod has terminated.

    :param pod: Kubernetes pod object
    :return: True if pod phase is Succeeded or Failed
    """
    return pod.status is not None and pod.status.phase in COMPLETED_PHASES


def is_mirror_pod(pod: k8s.V1Pod) -> bool:
    """Check if pod is a mirror of a kubelet static pod.

    :param pod: Kubernetes pod object
    :return: True if pod carries the mirror pod annotation
    """
    annotations = pod.metadata.annotations or {}
    return MIRROR_POD_ANNOTATION in annotations


def is_daemonset_pod(pod: k8s.V1Pod) -> bool:
    """Check if pod is owned by a DaemonSet.

    :param pod: Kubernetes pod object
    :return: True if pod is owned by a DaemonSet
    """
    owner_references = pod.metadata.owner_references or []
    return any(owner.kind == "DaemonSet" for owner in owner_references)


def has_local_data(pod: k8s.V1Pod) -> bool:
    """Check if pod mounts node local storage.

    emptyDir and hostPath volumes are treated as local data regardless of what
    backs them.

    :param pod: Kubernetes pod object
    :return: True if pod declares an emptyDir or hostPath volume
    """
    volumes = (pod.spec.volumes if pod.spec else None) or []
    return any(
        volume.empty_dir is not None or volume.host_path is not None for volume in volumes
    )
