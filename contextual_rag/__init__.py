"""Contextual retrieval pipeline: chunking, chunk context, embeddings, hybrid search."""

__version__ = "0.1.0"
