"""
Pydantic schemas for QShield operation results

Typed envelopes for the analyze, refactor and test-generation operations.
Nested payloads (findings, changes, simulated suites) are the pipeline's
own dataclasses.
"""

from .responses import (
    AnalysisResponse,
    GeneratedTestsMetadata,
    GeneratedTestsResponse,
    RefactorMetadata,
    RefactorResponse,
)

__all__ = [
    "AnalysisResponse",
    "RefactorMetadata",
    "RefactorResponse",
    "GeneratedTestsMetadata",
    "GeneratedTestsResponse",
]
