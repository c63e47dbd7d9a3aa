"""Core orchestration for gitlinks.

This package holds the dependency scanner, source reference extractor,
request ledger, operation queue and the orchestration loop.
"""

from gitlinks.core.descriptor import extract_git_dependencies, read_git_dependencies
from gitlinks.core.ledger import LinkSet, RequestLedger
from gitlinks.core.orchestrator import Orchestrator, UpdateCheck
from gitlinks.core.queue import OperationQueue
from gitlinks.core.source_ref import extract_git_source_from_id

__all__ = [
    "LinkSet",
    "OperationQueue",
    "Orchestrator",
    "RequestLedger",
    "UpdateCheck",
    "extract_git_dependencies",
    "extract_git_source_from_id",
    "read_git_dependencies",
]
