"""Protocol interfaces for the near_event_agent collaborators."""

from near_event_agent.interfaces.account import AccountProvider, NearAccount
from near_event_agent.interfaces.explorer import ReceiptExplorer
from near_event_agent.interfaces.sampling import SamplingChannel
from near_event_agent.interfaces.scheduler import JobCallback, JobScheduler

__all__ = [
    "AccountProvider", "NearAccount",
    "ReceiptExplorer",
    "SamplingChannel",
    "JobCallback", "JobScheduler",
]
