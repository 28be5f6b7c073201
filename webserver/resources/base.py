import mmh3
import hashlib
from typing import Any, Dict, Optional, Union
from webserver.utils.helpers import canonicalize_dict
from webserver.common.models.labels import Labels
from webserver.utils.errors import already_exists_error
from kubernetes_asyncio.client import (
    ApiException,
    AppsV1Api,
    CoreV1Api,
    CustomObjectsApi,
    RbacAuthorizationV1Api,
    V1ConfigMap,
    V1Deployment,
    V1PersistentVolumeClaim,
    V1Pod,
    V1PodList,
    V1RoleBinding,
    V1Service,
)


class BaseResource:
    """Base resource model.

    Resources are only ever created when absent: `create_*` methods treat an
    `AlreadyExists` response as success and existing objects are never
    replaced or patched.
    """

    RESOURCE_HASH_ANNOTATION = "webserver.servers.org/resource-hash"

    _namespace: str
    _labels: Labels

    def __init__(self, namespace: str, labels: Labels):
        self._namespace = namespace
        self._labels = labels

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def labels(self) -> Labels:
        return self._labels

    def compute_hash(self, data: Any) -> str:
        """Compute a murmur3 hash."""
        if isinstance(data, dict):
            _data = canonicalize_dict(data)
        elif isinstance(data, str):
            _data = data.encode()
        else:
            raise ValueError(f"Hash of {type(data)} is not supporetd.")
        mumur_str = str(mmh3.hash128(_data))

        hash_obj = hashlib.sha256(mumur_str.encode("utf-8"))
        full_hash = hash_obj.hexdigest()

        # First 16 characters keep annotations readable
        return full_hash[:16]

    def prepare_hash_annotation(self, hash: Union[str, int]) -> Dict[str, str]:
        """Prepare hash annotation for k8s resources."""
        return {self.RESOURCE_HASH_ANNOTATION: str(hash)}

    async def fetch_service(
        self, core_v1_api: CoreV1Api, name: str, namespace: str
    ) -> Optional[V1Service]:
        """Retrieve the latest state of a service"""
        try:
            return await core_v1_api.read_namespaced_service(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if ex.status == 404:
                return None
            raise

    async def create_service(
        self, core_v1_api: CoreV1Api, namespace: str, service: V1Service
    ) -> None:
        try:
            await core_v1_api.create_namespaced_service(
                namespace=namespace, body=service
            )
        except ApiException as ex:
            if not already_exists_error(ex):
                raise

    async def fetch_config_map(
        self, core_v1_api: CoreV1Api, name: str, namespace: str
    ) -> Optional[V1ConfigMap]:
        try:
            return await core_v1_api.read_namespaced_config_map(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if ex.status == 404:
                return None
            raise

    async def create_config_map(
        self, core_v1_api: CoreV1Api, namespace: str, config_map: V1ConfigMap
    ) -> None:
        try:
            await core_v1_api.create_namespaced_config_map(
                namespace=namespace, body=config_map
            )
        except ApiException as ex:
            if not already_exists_error(ex):
                raise

    async def fetch_persistent_volume_claim(
        self, core_v1_api: CoreV1Api, name: str, namespace: str
    ) -> Optional[V1PersistentVolumeClaim]:
        try:
            return await core_v1_api.read_namespaced_persistent_volume_claim(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if ex.status == 404:
                return None
            raise

    async def create_persistent_volume_claim(
        self,
        core_v1_api: CoreV1Api,
        namespace: str,
        persistent_volume_claim: V1PersistentVolumeClaim,
    ) -> None:
        try:
            await core_v1_api.create_namespaced_persistent_volume_claim(
                namespace=namespace, body=persistent_volume_claim
            )
        except ApiException as ex:
            if not already_exists_error(ex):
                raise

    async def fetch_pod(
        self, core_v1_api: CoreV1Api, name: str, namespace: str
    ) -> Optional[V1Pod]:
        try:
            return await core_v1_api.read_namespaced_pod(name=name, namespace=namespace)
        except ApiException as ex:
            if ex.status == 404:
                return None
            raise

    async def create_pod(
        self, core_v1_api: CoreV1Api, namespace: str, pod: V1Pod
    ) -> None:
        try:
            await core_v1_api.create_namespaced_pod(namespace=namespace, body=pod)
        except ApiException as ex:
            if not already_exists_error(ex):
                raise

    async def fetch_deployment(
        self, apps_v1_api: AppsV1Api, name: str, namespace: str
    ) -> Optional[V1Deployment]:
        try:
            return await apps_v1_api.read_namespaced_deployment(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if ex.status == 404:
                return None
            raise

    async def create_deployment(
        self, apps_v1_api: AppsV1Api, namespace: str, deployment: V1Deployment
    ) -> None:
        try:
            await apps_v1_api.create_namespaced_deployment(
                namespace=namespace, body=deployment
            )
        except ApiException as ex:
            if not already_exists_error(ex):
                raise

    async def fetch_role_binding(
        self, rbac_v1_api: RbacAuthorizationV1Api, name: str, namespace: str
    ) -> Optional[V1RoleBinding]:
        try:
            return await rbac_v1_api.read_namespaced_role_binding(
                name=name, namespace=namespace
            )
        except ApiException as ex:
            if ex.status == 404:
                return None
            raise

    async def create_role_binding(
        self,
        rbac_v1_api: RbacAuthorizationV1Api,
        namespace: str,
        role_binding: V1RoleBinding,
    ) -> None:
        try:
            await rbac_v1_api.create_namespaced_role_binding(
                namespace=namespace, body=role_binding
            )
        except ApiException as ex:
            if not already_exists_error(ex):
                raise

    async def get_custom_object(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        name: str,
    ):
        try:
            return await custom_objects_api.get_namespaced_custom_object(
                group=group,
                version=version,
                namespace=namespace,
                plural=plural,
                name=name,
            )
        except ApiException as ex:
            if ex.status == 404:
                return None
            raise

    async def create_custom_object(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        body: Dict,
    ) -> None:
        try:
            await custom_objects_api.create_namespaced_custom_object(
                group=group,
                version=version,
                namespace=namespace,
                plural=plural,
                body=body,
            )
        except ApiException as ex:
            if not already_exists_error(ex):
                raise

    async def list_pods(
        self,
        core_v1_api: CoreV1Api,
        namespace: str,
        label_selector: Optional[Labels] = None,
    ) -> V1PodList:
        """List pods in namespace, optionally filtered by label selector.

        Args:
            core_v1_api: CoreV1Api instance
            namespace: Namespace to list pods in
            label_selector: Labels every listed pod must carry

        Returns:
            V1PodList object containing matching pods
        """
        return await core_v1_api.list_namespaced_pod(
            namespace=namespace,
            label_selector=(
                label_selector.as_str() if label_selector is not None else None
            ),
        )
