"""
Medical RAG Pipeline - grounded answers to health questions.

Retrieves reference passages from an in-memory knowledge base, grounds a
generated answer strictly in them, and flags queries that may describe a
medical emergency.
"""

__version__ = "1.0.0"
