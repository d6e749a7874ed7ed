"""
Application services.

PostingBatchService lives in core.application.services.posting_batch_service;
it depends on the post order use case, which depends on the services below.
"""
from .dedup_normalizer import DedupNormalizer
from .document_builder import OrderDocumentBuilder
from .lookup_prefetcher import LookupCache, LookupPrefetcher

__all__ = [
    "DedupNormalizer",
    "LookupCache",
    "LookupPrefetcher",
    "OrderDocumentBuilder",
]
