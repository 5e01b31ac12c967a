from .fetcher import PayloadFetcher
from .notifications import NotificationSink
from .reachability import ReachabilityChecker
from .repos import CompaniesRepoPort, LeadsRepoPort

__all__ = [
    "PayloadFetcher",
    "NotificationSink",
    "ReachabilityChecker",
    "CompaniesRepoPort",
    "LeadsRepoPort",
]
