"""
Indexed entry model for the retrieval system.

Single responsibility: pair a document with its embedding inside a store.
For external APIs, entries are exposed as SearchResult
(defined in core.protocols).
"""

from dataclasses import dataclass

import numpy as np

from medical_rag_pipeline.schemas.medical import MedicalDocument


@dataclass(frozen=True)
class IndexedEntry:
    """
    A document with its embedding, owned exclusively by a vector store.

    Created on indexing, dropped on re-index or clear. The embedding
    array is made read-only so a shared snapshot cannot be edited.
    """

    document: MedicalDocument
    embedding: np.ndarray

    def __post_init__(self) -> None:
        self.embedding.setflags(write=False)

    @property
    def id(self) -> str:
        return self.document.id
