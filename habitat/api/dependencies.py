"""
Dependency injection for FastAPI.
"""
from functools import lru_cache
from typing import Annotated
from fastapi import Depends

from habitat.config import settings
from habitat.infrastructure.external_api_client import (
    ExternalAPIClient,
    get_api_client,
)
from habitat.services.domain.synthetic_data import (
    SeededSyntheticDataProvider,
    SyntheticDataProvider,
)
from habitat.services.application.monitoring_service import MonitoringService


@lru_cache(maxsize=1)
def get_synthetic_data_provider() -> SyntheticDataProvider:
    """
    Dependency factory for the synthetic data provider.

    A single provider is shared so a configured seed yields one
    reproducible stream across requests.

    Returns:
        SyntheticDataProvider instance
    """
    return SeededSyntheticDataProvider(seed=settings.synthetic_seed)


def get_monitoring_service(
    api_client: Annotated[ExternalAPIClient, Depends(get_api_client)],
    synthetic: Annotated[SyntheticDataProvider, Depends(get_synthetic_data_provider)],
) -> MonitoringService:
    """
    Dependency factory for MonitoringService.

    Args:
        api_client: Upstream data provider client (injected)
        synthetic: Synthetic data provider (injected)

    Returns:
        MonitoringService instance
    """
    return MonitoringService(
        api_client=api_client,
        synthetic=synthetic,
        satellite_radius_km=settings.satellite_radius_km,
        deforestation_radius_km=settings.deforestation_radius_km,
    )


# Type aliases for cleaner route signatures
MonitoringServiceDep = Annotated[MonitoringService, Depends(get_monitoring_service)]
