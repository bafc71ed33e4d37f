"""Message collection, keyword filtering and fingerprinting.

Public API:
- CollectorService: Filters, deduplicates and submits incoming messages
- KeywordFilter: Cheap keyword gate applied before extraction
- Message: Incoming message model
- compute_fingerprint: Whitespace-insensitive content hash
"""

from job_intake.collector.fingerprint import compute_fingerprint
from job_intake.collector.keyword_filter import KeywordFilter
from job_intake.collector.models import Message
from job_intake.collector.service import CollectorService

__all__ = [
    "CollectorService",
    "KeywordFilter",
    "Message",
    "compute_fingerprint",
]
