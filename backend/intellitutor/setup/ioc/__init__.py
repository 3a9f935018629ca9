from intellitutor.setup.ioc.container import (
    ApplicationProvider,
    InfrastructureProvider,
    create_container,
)

__all__ = [
    "ApplicationProvider",
    "InfrastructureProvider",
    "create_container",
]
