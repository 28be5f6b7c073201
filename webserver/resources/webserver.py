import kopf
import logging
from logging import Logger
from typing import Any, Dict, List, NamedTuple, Optional, Tuple
from webserver.common.models.labels import Labels
from webserver.resources.base import BaseResource
from webserver.sensors import SensorDelegate
from webserver.types.settings import Settings
from webserver.types.models.platform import PlatformCapability
from webserver.types.models.pod_status import PodState, PodStatus, WebServerStatus
from webserver.types.models.webserver_resources import WebServerResources
from webserver.types.models.webserver_spec import (
    WebServerSpec,
    WebServerHealthCheck,
    WebImage,
    WebImageStream,
    WebApp,
)
from webserver.types.schemas.pod_status import WebServerStatusSchema
from webserver.utils.build_script import generate_build_script, WAR_MOUNT_PATH
from webserver.utils.helpers import to_plain_dict
from kubernetes_asyncio.client import (
    AppsV1Api,
    CoreV1Api,
    CustomObjectsApi,
    RbacAuthorizationV1Api,
    RbacV1Subject,
    V1ConfigMap,
    V1ConfigMapVolumeSource,
    V1Container,
    V1ContainerPort,
    V1Deployment,
    V1DeploymentSpec,
    V1DeploymentStrategy,
    V1EnvVar,
    V1ExecAction,
    V1HTTPGetAction,
    V1LabelSelector,
    V1ObjectMeta,
    V1OwnerReference,
    V1PersistentVolumeClaim,
    V1PersistentVolumeClaimSpec,
    V1PersistentVolumeClaimVolumeSource,
    V1Pod,
    V1PodSpec,
    V1PodTemplateSpec,
    V1Probe,
    V1ResourceRequirements,
    V1RoleBinding,
    V1RoleRef,
    V1Service,
    V1ServicePort,
    V1ServiceSpec,
    V1Volume,
    V1VolumeMount,
)
from kubernetes_asyncio.client.api_client import ApiClient

_POD_PHASE_STATES = {
    "Pending": PodState.PENDING,
    "Running": PodState.ACTIVE,
}

_MEMBERSHIP_SCRIPT = (
    "FILE=`find /opt -name server.xml`\n"
    "grep -q MembershipProvider ${{FILE}}\n"
    "if [ $? -ne 0 ]; then\n"
    "  sed -i '/cluster.html/a        "
    '<Cluster className="org.apache.catalina.ha.tcp.SimpleTcpCluster" channelSendOptions="6">\\n'
    ' <Channel className="org.apache.catalina.tribes.group.GroupChannel">\\n'
    ' <Membership className="org.apache.catalina.tribes.membership.cloud.CloudMembershipService"'
    ' membershipProviderClassName="org.apache.catalina.tribes.membership.cloud.{provider}"/>\\n'
    " </Channel>\\n"
    " </Cluster>\\n' ${{FILE}}\n"
    "fi\n"
)


class TargetResource(NamedTuple):
    """A resource the operator makes sure exists for a WebServer.

    `body` is a kubernetes model for core kinds and a plain dictionary for
    the extended platform kinds.
    """

    kind: str
    name: str
    namespace: str
    body: Any


def parse_probe_command(script: str) -> List[str]:
    """Split a probe script of the form `shell -c "command"` into exec arguments.

    Everything before the first double quote is split on whitespace and the
    quoted remainder is kept as one argument without its enclosing quotes.
    A script without any double quote is split on whitespace only.
    """
    head, quote, rest = script.partition('"')
    command = head.split()
    if quote:
        command.append(rest[:-1] if rest.endswith('"') else rest)
    return command


def pod_state(phase: Optional[str]) -> PodState:
    """Fold a pod phase into the reported pod state."""
    return _POD_PHASE_STATES.get(phase, PodState.FAILED)


def sort_pods_by_name(pods: List) -> List:
    """Stable lexical sort of pods by name.

    Matches ordinal order only while ordinal suffixes share the same width.
    """
    return sorted(pods, key=lambda pod: pod.metadata.name)


def aggregate_pod_status(pods: List) -> Tuple[WebServerStatus, bool]:
    """Build the reported status of `pods`.

    Returns:
        The status and whether another pass is needed because a pod has no
        IP address yet.
    """
    requeue = False
    statuses = []
    for pod in sort_pods_by_name(pods):
        pod_ip = (pod.status.pod_ip if pod.status else None) or ""
        phase = pod.status.phase if pod.status else None
        statuses.append(
            PodStatus(name=pod.metadata.name, pod_ip=pod_ip, state=pod_state(phase))
        )
        if not pod_ip:
            requeue = True
    return WebServerStatus(pods=statuses), requeue


class WebServer(BaseResource):
    """WebServer kubernetes resource."""

    logger: Logger
    conf: Settings = Settings()
    sensor: SensorDelegate = SensorDelegate()
    shared_api_client: ApiClient = None  # Shared across all WebServer instances

    KIND = "WebServer"
    GROUP_NAME = "web.servers.org"

    HTTP_PORT = 8080
    HTTP_PORT_NAME = "http"
    ROUTING_PORT_NAME = "ui"
    JOLOKIA_PORT = 8778
    JOLOKIA_PORT_NAME = "jolokia"
    HEALTH_CHECK_PATH = "/health"
    TERMINATION_GRACE_PERIOD_SECONDS = 60
    REPLICAS = 1

    APP_VOLUME_NAME = "app-volume"
    BUILD_CONTAINER_NAME = "war"
    ENV_FILES_MOUNT_PATH = "/test/my-files"
    ENV_FILES_SCRIPT_NAME = "test.sh"
    VIEW_CLUSTER_ROLE = "view"
    DEFAULT_SERVICE_ACCOUNT = "default"
    ROUTE_DESCRIPTION = "Route for application's http service."

    # kind -> (group, version, plural) of the extended platform kinds
    EXTENDED_KINDS = {
        "ImageStream": ("image.openshift.io", "v1", "imagestreams"),
        "BuildConfig": ("build.openshift.io", "v1", "buildconfigs"),
        "DeploymentConfig": ("apps.openshift.io", "v1", "deploymentconfigs"),
        "Route": ("route.openshift.io", "v1", "routes"),
    }

    name: str
    application_name: str
    use_session_clustering: bool
    image_source: Any
    health_check: Optional[WebServerHealthCheck]
    owner_reference: Optional[Dict[str, Any]] = None
    extra_labels: Labels

    service_name: str
    headless_service_name: str
    role_binding_name: str
    config_map_name: str
    persistent_volume_claim_name: str
    build_pod_name: str
    deployment_name: str

    # k8s resources
    _api_client: ApiClient = None
    _apps_v1_api: AppsV1Api = None
    _core_v1_api: CoreV1Api = None
    _rbac_v1_api: RbacAuthorizationV1Api = None
    _custom_objects_api: CustomObjectsApi = None

    def __init__(
        self,
        name: str,
        namespace: str,
        application_name: str,
        labels: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            namespace=namespace,
            labels=Labels().include_application(application_name),
        )
        self.name = name
        self.application_name = application_name
        self.extra_labels = Labels(labels)

    @classmethod
    def from_spec(
        self,
        name: str,
        kind: str,
        namespace: str,
        spec: WebServerSpec,
        owner: Optional[Dict[str, Any]] = None,
        labels: Optional[Dict[str, str]] = None,
        logger: Logger = None,
        conf: Settings = None,
    ) -> "WebServer":
        server = WebServer(name, namespace, spec.application_name, labels)
        server.logger = logger or logging.getLogger(__name__)
        if conf is not None:
            server.conf = conf
        if owner is not None:
            server.owner_reference = kopf.build_owner_reference(owner)
        server.use_session_clustering = spec.use_session_clustering
        server.image_source = spec.image_source
        server.health_check = spec.health_check
        server.service_name = WebServerResources.service_name(spec.application_name)
        server.headless_service_name = WebServerResources.headless_service_name(name)
        server.role_binding_name = WebServerResources.role_binding_name(name)
        server.config_map_name = WebServerResources.config_map_name(name)
        server.persistent_volume_claim_name = (
            WebServerResources.persistent_volume_claim_name(spec.application_name)
        )
        server.build_pod_name = WebServerResources.build_pod_name(
            spec.application_name
        )
        server.deployment_name = WebServerResources.deployment_name(
            spec.application_name
        )
        return server

    # -------------------------------------------------------------------------
    # Desired state
    # -------------------------------------------------------------------------

    def desired_resources(self, platform: PlatformCapability) -> List[TargetResource]:
        """Every resource that must exist for this WebServer on `platform`."""
        resources = [
            self.target(self.prepare_service()),
            self.target(self.prepare_headless_service()),
            self.target(self.prepare_role_binding()),
        ]
        if self.use_session_clustering:
            resources.append(self.target(self.prepare_config_map()))

        if isinstance(self.image_source, WebImage):
            if self.web_app is not None:
                resources.append(self.target(self.prepare_persistent_volume_claim()))
                resources.append(self.target(self.prepare_build_pod()))
            resources.append(self.target(self.prepare_deployment()))
        elif isinstance(self.image_source, WebImageStream):
            if platform.extended:
                resources.append(self.target(self.prepare_image_stream()))
                if self.image_source.web_sources is not None:
                    resources.append(self.target(self.prepare_build_config()))
                resources.append(self.target(self.prepare_deployment_config()))
            else:
                self.logger.warning(
                    "webImageStream requires image streams and build configs, "
                    "which this cluster does not serve. No workload is created."
                )

        if platform.extended:
            resources.append(self.target(self.prepare_route()))
        return resources

    def target(self, body: Any) -> TargetResource:
        if isinstance(body, dict):
            metadata = body["metadata"]
            return TargetResource(
                body["kind"], metadata["name"], metadata["namespace"], body
            )
        return TargetResource(
            body.kind, body.metadata.name, body.metadata.namespace, body
        )

    @property
    def web_app(self) -> Optional[WebApp]:
        if isinstance(self.image_source, WebImage):
            return self.image_source.web_app
        return None

    @property
    def selector_labels(self) -> Labels:
        """Labels identifying the application pods of this WebServer."""
        return (
            Labels()
            .include_deployment_config(self.application_name)
            .include_webserver(self.name)
        )

    @property
    def pod_labels(self) -> Labels:
        return self.labels.merge(self.selector_labels.as_dict())

    @property
    def pod_selector_labels(self) -> Labels:
        """Labels used to list application pods, including the CR's own labels."""
        return self.selector_labels.merge(self.extra_labels.as_dict())

    def prepare_object_meta(
        self,
        name: str,
        labels: Optional[Labels] = None,
        annotations: Optional[Dict[str, str]] = None,
    ) -> V1ObjectMeta:
        owner_references = None
        if self.owner_reference is not None:
            owner_references = [
                V1OwnerReference(
                    api_version=self.owner_reference["apiVersion"],
                    kind=self.owner_reference["kind"],
                    name=self.owner_reference["name"],
                    uid=self.owner_reference["uid"],
                    controller=self.owner_reference.get("controller"),
                    block_owner_deletion=self.owner_reference.get(
                        "blockOwnerDeletion"
                    ),
                )
            ]
        return V1ObjectMeta(
            name=name,
            namespace=self.namespace,
            labels=(labels or self.labels).as_dict(),
            annotations=annotations,
            owner_references=owner_references,
        )

    def prepare_custom_object_meta(
        self, name: str, annotations: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        metadata = {
            "name": name,
            "namespace": self.namespace,
            "labels": self.labels.as_dict(),
        }
        if annotations:
            metadata["annotations"] = dict(annotations)
        if self.owner_reference is not None:
            metadata["ownerReferences"] = [dict(self.owner_reference)]
        return metadata

    def with_hash_annotation(self, body: Any) -> Any:
        """Stamp `body` with the hash of its content."""
        hash_annotation = self.prepare_hash_annotation(
            self.compute_hash(to_plain_dict(body))
        )
        if isinstance(body, dict):
            body["metadata"].setdefault("annotations", {}).update(hash_annotation)
        else:
            annotations = body.metadata.annotations or {}
            annotations.update(hash_annotation)
            body.metadata.annotations = annotations
        return body

    def prepare_service(self) -> V1Service:
        """Build the service routing to the application pods."""
        service = V1Service(
            api_version="v1",
            kind="Service",
            metadata=self.prepare_object_meta(self.service_name),
            spec=V1ServiceSpec(
                selector=self.selector_labels.as_dict(),
                ports=[
                    V1ServicePort(
                        name=self.ROUTING_PORT_NAME,
                        port=self.HTTP_PORT,
                        target_port=self.HTTP_PORT,
                    )
                ],
            ),
        )
        return self.with_hash_annotation(service)

    def prepare_headless_service(self) -> V1Service:
        """Build the headless service used for peer discovery."""
        service = V1Service(
            api_version="v1",
            kind="Service",
            metadata=self.prepare_object_meta(self.headless_service_name),
            spec=V1ServiceSpec(
                cluster_ip="None",
                selector=self.labels.as_dict(),
                ports=[
                    V1ServicePort(
                        name=self.HTTP_PORT_NAME,
                        port=self.HTTP_PORT,
                        target_port=self.HTTP_PORT,
                    )
                ],
            ),
        )
        return self.with_hash_annotation(service)

    def prepare_role_binding(self) -> V1RoleBinding:
        """Grant the default service account view access, needed for peer discovery."""
        role_binding = V1RoleBinding(
            api_version="rbac.authorization.k8s.io/v1",
            kind="RoleBinding",
            metadata=self.prepare_object_meta(self.role_binding_name),
            role_ref=V1RoleRef(
                api_group="rbac.authorization.k8s.io",
                kind="ClusterRole",
                name=self.VIEW_CLUSTER_ROLE,
            ),
            subjects=[
                RbacV1Subject(
                    kind="ServiceAccount",
                    name=self.DEFAULT_SERVICE_ACCOUNT,
                    namespace=self.namespace,
                )
            ],
        )
        return self.with_hash_annotation(role_binding)

    def prepare_membership_script(self) -> str:
        """Script adding a session clustering section to server.xml unless present."""
        provider = (
            "KubernetesMembershipProvider"
            if self.conf.use_kube_ping
            else "DNSMembershipProvider"
        )
        return _MEMBERSHIP_SCRIPT.format(provider=provider)

    def prepare_config_map(self) -> V1ConfigMap:
        config_map = V1ConfigMap(
            api_version="v1",
            kind="ConfigMap",
            metadata=self.prepare_object_meta(self.config_map_name),
            data={self.ENV_FILES_SCRIPT_NAME: self.prepare_membership_script()},
        )
        return self.with_hash_annotation(config_map)

    def prepare_persistent_volume_claim(self) -> V1PersistentVolumeClaim:
        """Build the volume receiving the web archive produced by the build pod."""
        pvc = V1PersistentVolumeClaim(
            api_version="v1",
            kind="PersistentVolumeClaim",
            metadata=self.prepare_object_meta(self.persistent_volume_claim_name),
            spec=V1PersistentVolumeClaimSpec(
                access_modes=["ReadWriteOnce"],
                resources=V1ResourceRequirements(
                    requests={"storage": self.web_app.application_size_limit}
                ),
            ),
        )
        return self.with_hash_annotation(pvc)

    def prepare_build_script(self) -> str:
        """The user build script, or the default maven build when none is given."""
        web_app = self.web_app
        if web_app.builder.application_build_script:
            return web_app.builder.application_build_script
        return generate_build_script(
            web_app.war_file_name,
            web_app.source_repository_url,
            ref=web_app.source_repository_ref,
            context_dir=web_app.context_dir,
        )

    def prepare_build_pod(self) -> V1Pod:
        pod = V1Pod(
            api_version="v1",
            kind="Pod",
            metadata=self.prepare_object_meta(
                self.build_pod_name, labels=self.labels.include_webserver(self.name)
            ),
            spec=V1PodSpec(
                termination_grace_period_seconds=self.TERMINATION_GRACE_PERIOD_SECONDS,
                restart_policy="OnFailure",
                volumes=[
                    V1Volume(
                        name=self.APP_VOLUME_NAME,
                        persistent_volume_claim=V1PersistentVolumeClaimVolumeSource(
                            claim_name=self.persistent_volume_claim_name
                        ),
                    )
                ],
                containers=[
                    V1Container(
                        name=self.BUILD_CONTAINER_NAME,
                        image=self.web_app.builder.image,
                        command=["/bin/sh", "-c"],
                        args=[self.prepare_build_script()],
                        volume_mounts=[
                            V1VolumeMount(
                                name=self.APP_VOLUME_NAME, mount_path=WAR_MOUNT_PATH
                            )
                        ],
                    )
                ],
            ),
        )
        return self.with_hash_annotation(pod)

    def prepare_probe(self, script: Optional[str]) -> V1Probe:
        """Exec probe from a custom script, HTTP probe on /health otherwise."""
        if script and script.strip():
            return V1Probe(_exec=V1ExecAction(command=parse_probe_command(script)))
        return V1Probe(
            http_get=V1HTTPGetAction(path=self.HEALTH_CHECK_PATH, port=self.HTTP_PORT)
        )

    def prepare_container_probes(self) -> Dict[str, V1Probe]:
        health = self.health_check
        return {
            "readiness_probe": self.prepare_probe(
                health.server_readiness_script if health else None
            ),
            "liveness_probe": self.prepare_probe(
                health.server_liveness_script if health else None
            ),
        }

    def prepare_env_vars(self) -> List[V1EnvVar]:
        if self.use_session_clustering and self.conf.use_kube_ping:
            kubernetes_namespace = self.namespace
        else:
            kubernetes_namespace = WebServerResources.discovery_name(self.name)
        env_vars = [V1EnvVar(name="KUBERNETES_NAMESPACE", value=kubernetes_namespace)]
        if self.use_session_clustering:
            env_vars.append(
                V1EnvVar(
                    name="ENV_FILES",
                    value=f"{self.ENV_FILES_MOUNT_PATH}/{self.ENV_FILES_SCRIPT_NAME}",
                )
            )
        return env_vars

    def prepare_volume_mounts(self) -> List[V1VolumeMount]:
        volume_mounts = []
        if self.use_session_clustering:
            volume_mounts.append(
                V1VolumeMount(
                    name=self.config_map_name, mount_path=self.ENV_FILES_MOUNT_PATH
                )
            )
        if self.web_app is not None:
            war_file_name = self.web_app.war_file_name
            volume_mounts.append(
                V1VolumeMount(
                    name=self.APP_VOLUME_NAME,
                    mount_path=f"{self.web_app.deploy_path}{war_file_name}",
                    sub_path=war_file_name,
                )
            )
        return volume_mounts

    def prepare_volumes(self) -> List[V1Volume]:
        volumes = []
        if self.use_session_clustering:
            volumes.append(
                V1Volume(
                    name=self.config_map_name,
                    config_map=V1ConfigMapVolumeSource(name=self.config_map_name),
                )
            )
        if self.web_app is not None:
            volumes.append(
                V1Volume(
                    name=self.APP_VOLUME_NAME,
                    persistent_volume_claim=V1PersistentVolumeClaimVolumeSource(
                        claim_name=self.persistent_volume_claim_name, read_only=True
                    ),
                )
            )
        return volumes

    def prepare_container_ports(self) -> List[V1ContainerPort]:
        return [
            V1ContainerPort(
                name=self.JOLOKIA_PORT_NAME,
                container_port=self.JOLOKIA_PORT,
                protocol="TCP",
            ),
            V1ContainerPort(
                name=self.HTTP_PORT_NAME, container_port=self.HTTP_PORT, protocol="TCP"
            ),
        ]

    def prepare_pod_template(self, image: str) -> V1PodTemplateSpec:
        """Pod template shared by the deployment and the deployment config."""
        return V1PodTemplateSpec(
            metadata=V1ObjectMeta(
                name=self.application_name,
                namespace=self.namespace,
                labels=self.pod_labels.as_dict(),
            ),
            spec=V1PodSpec(
                termination_grace_period_seconds=self.TERMINATION_GRACE_PERIOD_SECONDS,
                containers=[
                    V1Container(
                        name=self.application_name,
                        image=image,
                        image_pull_policy="Always",
                        ports=self.prepare_container_ports(),
                        env=self.prepare_env_vars(),
                        volume_mounts=self.prepare_volume_mounts() or None,
                        **self.prepare_container_probes(),
                    )
                ],
                volumes=self.prepare_volumes() or None,
            ),
        )

    def prepare_deployment(self) -> V1Deployment:
        deployment = V1Deployment(
            api_version="apps/v1",
            kind="Deployment",
            metadata=self.prepare_object_meta(self.deployment_name),
            spec=V1DeploymentSpec(
                replicas=self.REPLICAS,
                strategy=V1DeploymentStrategy(type="Recreate"),
                selector=V1LabelSelector(match_labels=self.selector_labels.as_dict()),
                template=self.prepare_pod_template(
                    self.image_source.application_image
                ),
            ),
        )
        return self.with_hash_annotation(deployment)

    def prepare_image_stream(self) -> Dict[str, Any]:
        image_stream = {
            "apiVersion": "image.openshift.io/v1",
            "kind": "ImageStream",
            "metadata": self.prepare_custom_object_meta(self.application_name),
        }
        return self.with_hash_annotation(image_stream)

    def prepare_build_env(self) -> List[Dict[str, str]]:
        params = self.image_source.web_sources.web_sources_params
        env = []
        if params is not None:
            if params.maven_mirror_url:
                env.append({"name": "MAVEN_MIRROR_URL", "value": params.maven_mirror_url})
            if params.artifact_dir:
                env.append({"name": "ARTIFACT_DIR", "value": params.artifact_dir})
        return env

    def prepare_build_triggers(self) -> List[Dict[str, Any]]:
        triggers = [
            {"type": "ImageChange", "imageChange": {}},
            {"type": "ConfigChange"},
        ]
        params = self.image_source.web_sources.web_sources_params
        if params is not None:
            if params.github_webhook_secret:
                triggers.append(
                    {"type": "GitHub", "github": {"secret": params.github_webhook_secret}}
                )
            if params.generic_webhook_secret:
                triggers.append(
                    {
                        "type": "Generic",
                        "generic": {"secret": params.generic_webhook_secret},
                    }
                )
        return triggers

    def prepare_build_config(self) -> Dict[str, Any]:
        """Source-to-image build of the application from its git repository."""
        image_stream: WebImageStream = self.image_source
        sources = image_stream.web_sources
        git = {"uri": sources.source_repository_url}
        if sources.source_repository_ref:
            git["ref"] = sources.source_repository_ref
        source = {"type": "Git", "git": git}
        if sources.context_dir:
            source["contextDir"] = sources.context_dir
        source_strategy = {
            "forcePull": True,
            "from": {
                "kind": "ImageStreamTag",
                "namespace": image_stream.image_stream_namespace,
                "name": WebServerResources.image_stream_tag(
                    image_stream.image_stream_name
                ),
            },
        }
        env = self.prepare_build_env()
        if env:
            source_strategy["env"] = env
        build_config = {
            "apiVersion": "build.openshift.io/v1",
            "kind": "BuildConfig",
            "metadata": self.prepare_custom_object_meta(self.application_name),
            "spec": {
                "source": source,
                "strategy": {"type": "Source", "sourceStrategy": source_strategy},
                "output": {
                    "to": {
                        "kind": "ImageStreamTag",
                        "name": WebServerResources.image_stream_tag(
                            self.application_name
                        ),
                    }
                },
                "triggers": self.prepare_build_triggers(),
            },
        }
        return self.with_hash_annotation(build_config)

    def prepare_deployment_config(self) -> Dict[str, Any]:
        """Deployment config redeploying whenever the build output tag changes."""
        deployment_config = {
            "apiVersion": "apps.openshift.io/v1",
            "kind": "DeploymentConfig",
            "metadata": self.prepare_custom_object_meta(self.deployment_name),
            "spec": {
                "replicas": self.REPLICAS,
                "strategy": {"type": "Recreate"},
                "triggers": [
                    {
                        "type": "ImageChange",
                        "imageChangeParams": {
                            "automatic": True,
                            "containerNames": [self.application_name],
                            "from": {
                                "kind": "ImageStreamTag",
                                "name": WebServerResources.image_stream_tag(
                                    self.application_name
                                ),
                                "namespace": self.namespace,
                            },
                        },
                    },
                    {"type": "ConfigChange"},
                ],
                "selector": self.selector_labels.as_dict(),
                "template": self.prepare_pod_template(self.application_name),
            },
        }
        return self.with_hash_annotation(deployment_config)

    def prepare_route(self) -> Dict[str, Any]:
        route = {
            "apiVersion": "route.openshift.io/v1",
            "kind": "Route",
            "metadata": self.prepare_custom_object_meta(
                self.service_name, annotations={"description": self.ROUTE_DESCRIPTION}
            ),
            "spec": {"to": {"kind": "Service", "name": self.service_name}},
        }
        return self.with_hash_annotation(route)

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    async def fetch_target(self, target: TargetResource) -> Optional[Any]:
        """Retrieve the live object matching `target`, None when absent."""
        if target.kind in self.EXTENDED_KINDS:
            group, version, plural = self.EXTENDED_KINDS[target.kind]
            return await self.get_custom_object(
                self.custom_objects_api,
                target.namespace,
                group,
                version,
                plural,
                target.name,
            )
        fetch, _, api = self.target_operations[target.kind]
        return await fetch(api, target.name, target.namespace)

    async def create_target(self, target: TargetResource) -> None:
        if target.kind in self.EXTENDED_KINDS:
            group, version, plural = self.EXTENDED_KINDS[target.kind]
            await self.create_custom_object(
                self.custom_objects_api,
                target.namespace,
                group,
                version,
                plural,
                target.body,
            )
            return
        _, create, api = self.target_operations[target.kind]
        await create(api, target.namespace, target.body)

    @property
    def target_operations(self) -> Dict[str, Tuple]:
        """kind -> (fetch, create, api) of the core kinds."""
        return {
            "Service": (self.fetch_service, self.create_service, self.core_v1_api),
            "ConfigMap": (
                self.fetch_config_map,
                self.create_config_map,
                self.core_v1_api,
            ),
            "PersistentVolumeClaim": (
                self.fetch_persistent_volume_claim,
                self.create_persistent_volume_claim,
                self.core_v1_api,
            ),
            "Pod": (self.fetch_pod, self.create_pod, self.core_v1_api),
            "Deployment": (
                self.fetch_deployment,
                self.create_deployment,
                self.apps_v1_api,
            ),
            "RoleBinding": (
                self.fetch_role_binding,
                self.create_role_binding,
                self.rbac_v1_api,
            ),
        }

    async def synchronize(self, platform: PlatformCapability) -> bool:
        """Create every desired resource that does not exist yet.

        Existing resources are left untouched. Errors other than a concurrent
        creation abort the pass.

        Returns:
            True when at least one resource was created.
        """
        created = False
        for target in self.desired_resources(platform):
            if await self.fetch_target(target) is not None:
                continue
            self.logger.info(
                f"Creating a new {target.kind} {target.namespace}/{target.name}"
            )
            sensor_state = self.sensor.on_resource_create_start(
                self.name, target.name, target.namespace, target.kind
            )
            success, error = True, None
            try:
                await self.create_target(target)
            except Exception as ex:
                success, error = False, ex
                raise
            finally:
                self.sensor.on_resource_create_complete(
                    self.name,
                    target.name,
                    target.namespace,
                    target.kind,
                    sensor_state,
                    success,
                    error,
                )
            created = True
        return created

    async def fetch_pod_status(self) -> Tuple[WebServerStatus, bool]:
        """List the application pods and aggregate their status."""
        pods = await self.list_pods(
            self.core_v1_api, self.namespace, self.pod_selector_labels
        )
        status, requeue = aggregate_pod_status(pods.items or [])
        pending = len([pod for pod in status.pods if not pod.pod_ip])
        self.sensor.on_pods_pending(self.name, self.namespace, len(status.pods), pending)
        if requeue:
            self.logger.info(
                "Some pods don't have an IP address yet, reconciliation requeue scheduled"
            )
        return status, requeue

    def publish_status(self, patch: kopf.Patch, status: WebServerStatus) -> None:
        """Replace the reported pods on the WebServer status."""
        patch.status["pods"] = WebServerStatusSchema().dump(status)["pods"]
        self.sensor.on_status_update(self.name, self.namespace, ["pods"])

    @property
    def api_client(self) -> ApiClient:
        if self._api_client is None:
            # Use the shared API client if available, otherwise create a new one
            if self.shared_api_client is not None:
                self._api_client = self.shared_api_client
            else:
                self._api_client = ApiClient()
        return self._api_client

    @property
    def apps_v1_api(self) -> AppsV1Api:
        if self._apps_v1_api is None:
            self._apps_v1_api = AppsV1Api(self.api_client)
        return self._apps_v1_api

    @property
    def core_v1_api(self) -> CoreV1Api:
        if self._core_v1_api is None:
            self._core_v1_api = CoreV1Api(self.api_client)
        return self._core_v1_api

    @property
    def rbac_v1_api(self) -> RbacAuthorizationV1Api:
        if self._rbac_v1_api is None:
            self._rbac_v1_api = RbacAuthorizationV1Api(self.api_client)
        return self._rbac_v1_api

    @property
    def custom_objects_api(self) -> CustomObjectsApi:
        if self._custom_objects_api is None:
            self._custom_objects_api = CustomObjectsApi(self.api_client)
        return self._custom_objects_api
