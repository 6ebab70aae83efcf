"""
pdf-rag: question answering over uploaded PDF documents.

PDFs are extracted, chunked, embedded and stored in a vector index; questions
are answered by a chat model grounded on the most similar fragments.
"""

__version__ = "1.0.0"
