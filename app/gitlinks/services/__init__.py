"""Package services executing list, add, remove and search operations.

This module provides the abstract service interface and its npm-backed
and in-memory implementations.
"""

from gitlinks.services.base import CompletedOperation, PackageService, PendingOperation
from gitlinks.services.fake import FakePackageService
from gitlinks.services.npm import NpmService

__all__ = [
    "CompletedOperation",
    "FakePackageService",
    "NpmService",
    "PackageService",
    "PendingOperation",
]
