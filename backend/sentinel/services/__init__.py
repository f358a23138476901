from sentinel.services.container import DependencyContainer, get_container, reset_container

__all__ = [
    "DependencyContainer",
    "get_container",
    "reset_container",
]
