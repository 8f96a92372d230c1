from beacon_os.modules.analytics import AnalyticsEngine, StayRecord
from beacon_os.modules.messaging import MessagingHub
from beacon_os.modules.operations import HousekeepingTask, OperationsManager

__all__ = [
    "AnalyticsEngine",
    "StayRecord",
    "MessagingHub",
    "HousekeepingTask",
    "OperationsManager",
]
