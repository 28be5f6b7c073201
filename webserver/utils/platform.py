import logging
from kubernetes_asyncio.client import ApiClient, ApisApi
from webserver.types.models.platform import PlatformCapability
from webserver.types.settings import EXTENDED_PLATFORM_API_GROUP

logger = logging.getLogger(__name__)


async def detect_platform(
    api_client: ApiClient, api_group: str = EXTENDED_PLATFORM_API_GROUP
) -> PlatformCapability:
    """Classify the cluster by the API groups it serves.

    The cluster is `EXTENDED` when `api_group` is listed. Any failure to list
    the groups degrades to `BASELINE`.
    """
    try:
        group_list = await ApisApi(api_client).get_api_versions()
    except Exception:
        logger.exception(
            f"Failed to list API groups, assuming {PlatformCapability.BASELINE.value} platform."
        )
        return PlatformCapability.BASELINE

    for group in group_list.groups or []:
        if group.name == api_group:
            logger.info(f"{api_group} was found in apis, platform is extended.")
            return PlatformCapability.EXTENDED
    logger.info(f"{api_group} was not found in apis, platform is baseline.")
    return PlatformCapability.BASELINE
