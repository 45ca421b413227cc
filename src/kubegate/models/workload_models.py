"""Typed views of apps/v1 workload kinds.

These models are projections of the generic object returned by the cluster;
the generic object stays the source of truth.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from .base_models import KubeBaseModel


class OwnerReference(KubeBaseModel):
    api_version: str
    kind: str
    name: str
    uid: str
    controller: Optional[bool] = None


class ObjectMeta(KubeBaseModel):
    name: Optional[str] = None
    generate_name: Optional[str] = None
    namespace: Optional[str] = None
    uid: Optional[str] = None
    resource_version: Optional[str] = None
    generation: Optional[int] = None
    creation_timestamp: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    owner_references: List[OwnerReference] = Field(default_factory=list)


class LabelSelector(KubeBaseModel):
    match_labels: Dict[str, str] = Field(default_factory=dict)
    match_expressions: List[Dict[str, Any]] = Field(default_factory=list)


class ContainerPort(KubeBaseModel):
    container_port: int
    name: Optional[str] = None
    protocol: Optional[str] = None


class ResourceRequirements(KubeBaseModel):
    # quantities arrive as strings or bare numbers
    requests: Dict[str, Any] = Field(default_factory=dict)
    limits: Dict[str, Any] = Field(default_factory=dict)


class Container(KubeBaseModel):
    name: str
    image: Optional[str] = None
    command: List[str] = Field(default_factory=list)
    args: List[str] = Field(default_factory=list)
    ports: List[ContainerPort] = Field(default_factory=list)
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)
    image_pull_policy: Optional[str] = None


class PodSpec(KubeBaseModel):
    containers: List[Container] = Field(default_factory=list)
    init_containers: List[Container] = Field(default_factory=list)
    service_account_name: Optional[str] = None
    node_selector: Dict[str, str] = Field(default_factory=dict)
    restart_policy: Optional[str] = None


class PodTemplateSpec(KubeBaseModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PodSpec = Field(default_factory=PodSpec)


class WorkloadCondition(KubeBaseModel):
    type: str
    status: str
    reason: Optional[str] = None
    message: Optional[str] = None
    last_transition_time: Optional[str] = None


class DeploymentSpec(KubeBaseModel):
    replicas: Optional[int] = None
    selector: LabelSelector = Field(default_factory=LabelSelector)
    template: PodTemplateSpec = Field(default_factory=PodTemplateSpec)
    strategy: Dict[str, Any] = Field(default_factory=dict)
    min_ready_seconds: Optional[int] = None
    revision_history_limit: Optional[int] = None
    paused: Optional[bool] = None


class DeploymentStatus(KubeBaseModel):
    observed_generation: Optional[int] = None
    replicas: int = 0
    updated_replicas: int = 0
    ready_replicas: int = 0
    available_replicas: int = 0
    unavailable_replicas: int = 0
    conditions: List[WorkloadCondition] = Field(default_factory=list)


class Deployment(KubeBaseModel):
    api_version: str = "apps/v1"
    kind: str = "Deployment"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: DeploymentSpec = Field(default_factory=DeploymentSpec)
    status: DeploymentStatus = Field(default_factory=DeploymentStatus)


class StatefulSetSpec(KubeBaseModel):
    replicas: Optional[int] = None
    service_name: Optional[str] = None
    selector: LabelSelector = Field(default_factory=LabelSelector)
    template: PodTemplateSpec = Field(default_factory=PodTemplateSpec)
    pod_management_policy: Optional[str] = None
    update_strategy: Dict[str, Any] = Field(default_factory=dict)
    volume_claim_templates: List[Dict[str, Any]] = Field(default_factory=list)


class StatefulSetStatus(KubeBaseModel):
    observed_generation: Optional[int] = None
    replicas: int = 0
    ready_replicas: int = 0
    current_replicas: int = 0
    updated_replicas: int = 0
    available_replicas: int = 0
    conditions: List[WorkloadCondition] = Field(default_factory=list)


class StatefulSet(KubeBaseModel):
    api_version: str = "apps/v1"
    kind: str = "StatefulSet"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: StatefulSetSpec = Field(default_factory=StatefulSetSpec)
    status: StatefulSetStatus = Field(default_factory=StatefulSetStatus)


class DaemonSetSpec(KubeBaseModel):
    selector: LabelSelector = Field(default_factory=LabelSelector)
    template: PodTemplateSpec = Field(default_factory=PodTemplateSpec)
    update_strategy: Dict[str, Any] = Field(default_factory=dict)
    min_ready_seconds: Optional[int] = None


class DaemonSetStatus(KubeBaseModel):
    observed_generation: Optional[int] = None
    current_number_scheduled: int = 0
    desired_number_scheduled: int = 0
    number_ready: int = 0
    number_available: int = 0
    number_misscheduled: int = 0
    updated_number_scheduled: int = 0
    conditions: List[WorkloadCondition] = Field(default_factory=list)


class DaemonSet(KubeBaseModel):
    api_version: str = "apps/v1"
    kind: str = "DaemonSet"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: DaemonSetSpec = Field(default_factory=DaemonSetSpec)
    status: DaemonSetStatus = Field(default_factory=DaemonSetStatus)
