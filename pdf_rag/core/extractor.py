"""
PDF text extraction using PyMuPDF.

Turns the raw bytes of an uploaded PDF into a single plain-text string. Page
texts are joined with blank lines so the chunker's paragraph separator sees
page boundaries.
"""

from __future__ import annotations

import fitz  # PyMuPDF

from pdf_rag.utils.logging import LoggerMixin

PAGE_SEPARATOR = "\n\n"


class PdfTextExtractor(LoggerMixin):
    """
    Text extractor for PDF documents.

    Blank pages (image-only scans, separator pages) are skipped. Corrupt,
    encrypted or non-PDF input raises whatever PyMuPDF raises; the ingestion
    pipeline wraps it in ``ExtractionError``.

    Example:
        >>> extractor = PdfTextExtractor()
        >>> with open("whales.pdf", "rb") as f:
        ...     text = extractor.extract(f.read())
    """

    def extract(self, content: bytes) -> str:
        """
        Extract the text of every non-blank page.

        Args:
            content: Raw PDF bytes.

        Returns:
            Page texts joined with a blank line; empty when no page has text.
        """
        pages: list[str] = []

        with fitz.open(stream=content, filetype="pdf") as pdf:
            if pdf.needs_pass:
                raise ValueError("PDF is encrypted and cannot be read without a password")

            total_pages = len(pdf)
            for page_num in range(total_pages):
                text = pdf[page_num].get_text()

                if not text.strip():
                    self.logger.debug("Skipping empty page", page=page_num + 1)
                    continue

                pages.append(text.strip())

        self.logger.info(
            "PDF text extracted",
            total_pages=total_pages,
            pages_with_text=len(pages),
            num_bytes=len(content),
        )
        return PAGE_SEPARATOR.join(pages)
