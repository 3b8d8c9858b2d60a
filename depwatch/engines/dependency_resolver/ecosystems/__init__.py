"""Package ecosystems — auto-registered on import."""

from depwatch.engines.dependency_resolver.ecosystems import (
    composer,  # noqa: F401
    npm,  # noqa: F401
)
from depwatch.engines.dependency_resolver.ecosystems.base import (
    ECOSYSTEMS,
    Ecosystem,
    detection_order,
    get_ecosystem,
    register_ecosystem,
)

__all__ = ["ECOSYSTEMS", "Ecosystem", "detection_order", "get_ecosystem", "register_ecosystem"]
