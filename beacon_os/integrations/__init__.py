from beacon_os.integrations.base import IPropertyIntegration
from beacon_os.integrations.memory import InMemoryIntegration

__all__ = ["IPropertyIntegration", "InMemoryIntegration"]
