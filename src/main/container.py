"""
Dependency container injection module - Main Layer

This module implements the dependency injection container
to simplify the management and lifecycle of dependencies
in the application.
"""

from contextlib import asynccontextmanager

from dependency_injector import containers, providers

from src.application.models import SystemInfo
from src.application.services.device_controller_registry import (
    DeviceControllerRegistry,
)
from src.application.use_cases.circle_proxy_use_cases import CircleProxyUseCase
from src.application.use_cases.device_use_cases import (
    ExecuteDeviceCommandUseCase,
    GetDeviceStateUseCase,
    ListEntitiesUseCase,
    RefreshDeviceStateUseCase,
)
from src.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from src.application.use_cases.home_assistant_proxy_use_cases import (
    HomeAssistantProxyUseCase,
)
from src.infrastructure.gateways.circle_gateway import CircleGateway
from src.infrastructure.gateways.circle_wallets_client import CircleWalletsClient
from src.infrastructure.gateways.home_assistant_gateway import HomeAssistantGateway
from src.infrastructure.services.entity_secret_cipher import (
    CirclePublicKeyCache,
    EntitySecretCiphertextFactory,
)
from src.infrastructure.services.health_check_service import HealthCheckService
from src.shared import get_logger

from .config import AppSettings

logger = get_logger(__name__)


def _entity_secret_mode(entity_secret_hex, entity_secret) -> str:
    if entity_secret_hex:
        return "hex"
    if entity_secret:
        return "legacy"
    return "none"


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependecy-injector."""

    wiring_config = containers.WiringConfiguration(
        packages=["..presentation", "..application"]
    )

    # Settings
    config = providers.Configuration()

    # Gateways
    home_assistant_gateway = providers.Singleton(
        HomeAssistantGateway,
        base_url=config.home_assistant.host,
        token=config.home_assistant.token,
        timeout=config.home_assistant.timeout,
    )

    circle_gateway = providers.Singleton(
        CircleGateway,
        api_key=config.circle.api_key,
        base_url=config.circle.base_url,
        timeout=config.circle.timeout,
    )

    # Infrastructure services
    circle_public_key_cache = providers.Singleton(
        CirclePublicKeyCache,
        gateway=circle_gateway,
    )

    entity_secret_ciphertext_factory = providers.Singleton(
        EntitySecretCiphertextFactory,
        public_key_cache=circle_public_key_cache,
        secret_hex=config.circle.entity_secret_hex,
    )

    circle_wallets_client = providers.Singleton(
        CircleWalletsClient,
        api_key=config.circle.api_key,
        ciphertext_factory=entity_secret_ciphertext_factory,
        base_url=config.circle.base_url,
        timeout=config.circle.timeout,
    )

    device_controller_registry = providers.Singleton(
        DeviceControllerRegistry,
        gateway=home_assistant_gateway,
        auto_refresh=config.home_assistant.auto_refresh,
        refresh_interval=config.home_assistant.refresh_interval,
        throttle_interval=config.home_assistant.throttle_interval,
        follow_up_delays=config.home_assistant.follow_up_delays,
        max_controllers=config.home_assistant.max_controllers,
        idle_timeout=config.home_assistant.controller_idle_timeout,
    )

    health_check_service = providers.Singleton(
        HealthCheckService,
        home_assistant_url=config.home_assistant.host,
        home_assistant_token=config.home_assistant.token,
        circle_url=config.circle.base_url,
        circle_api_key=config.circle.api_key,
    )

    system_info = providers.Singleton(
        SystemInfo,
        title=config.app.title,
        description=config.app.description,
        version=config.app.version,
        environment=providers.Callable(
            lambda env: env.value if hasattr(env, "value") else str(env),
            config.environment,
        ),
        git_commit=config.app.git_commit,
        build_time=config.app.build_time,
        home_assistant_url=providers.Callable(
            lambda host: host or "", config.home_assistant.host
        ),
        home_assistant_proxy_prefix=config.home_assistant.proxy_prefix,
        home_assistant_token_configured=providers.Callable(
            bool, config.home_assistant.token
        ),
        circle_api_url=config.circle.base_url,
        circle_proxy_prefix=config.circle.proxy_prefix,
        circle_api_key_configured=providers.Callable(bool, config.circle.api_key),
        entity_secret_mode=providers.Callable(
            _entity_secret_mode,
            config.circle.entity_secret_hex,
            config.circle.entity_secret,
        ),
    )

    # Application (use cases)
    get_device_state_use_case = providers.Factory(
        GetDeviceStateUseCase,
        registry=device_controller_registry,
    )

    refresh_device_state_use_case = providers.Factory(
        RefreshDeviceStateUseCase,
        registry=device_controller_registry,
    )

    execute_device_command_use_case = providers.Factory(
        ExecuteDeviceCommandUseCase,
        registry=device_controller_registry,
    )

    list_entities_use_case = providers.Factory(
        ListEntitiesUseCase,
        home_assistant_gateway=home_assistant_gateway,
    )

    circle_proxy_use_case = providers.Factory(
        CircleProxyUseCase,
        circle_gateway=circle_gateway,
        wallet_set_client=circle_wallets_client,
        ciphertext_provider=entity_secret_ciphertext_factory,
        api_key=config.circle.api_key,
        entity_secret_hex=config.circle.entity_secret_hex,
        legacy_entity_secret=config.circle.entity_secret,
        default_wallet_set_name=config.circle.default_wallet_set_name,
    )

    home_assistant_proxy_use_case = providers.Factory(
        HomeAssistantProxyUseCase,
        home_assistant_gateway=home_assistant_gateway,
        host=config.home_assistant.host,
    )

    get_health_status_use_case = providers.Factory(
        GetHealthStatusUseCase,
        health_check_service=health_check_service,
        registry=device_controller_registry,
        public_key_cached=providers.Callable(
            bool, circle_public_key_cache.provided.cached
        ),
    )

    get_application_info_use_case = providers.Factory(
        GetApplicationInfoUseCase,
        system_info=system_info,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container


@asynccontextmanager
async def app_lifespan():
    """
    Centralized lifecycle management for process-scoped resources.

    Device controllers own event-loop timers, so the registry is disposed on
    shutdown; the public-key cache simply ends with the process.
    """
    container = get_container()
    registry = container.device_controller_registry()

    try:
        logger.info("container.resources.initialized")
        yield container

    finally:
        logger.info("container.device_registry.close")
        registry.close()
        logger.info("container.resources.shutdown")
