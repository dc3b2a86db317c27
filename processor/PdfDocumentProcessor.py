# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-08
# Updated: 2026-01-27
# Description: PdfDocumentProcessor
# -----------------------------------------------------------------------------
import time
from typing import List, Tuple

import fitz

from processor.DocumentProcessor import (
    BaseDocumentProcessor,
    DocumentMetadata,
    ProcessedChunk,
    decode_content,
)


class PdfDocumentProcessor(BaseDocumentProcessor):
    processor_type = "pdf"
    SUPPORTED_TYPES = ("application/pdf",)

    def extract_text_from_pdf(self, pdf_bytes: bytes) -> Tuple[List[str], int]:
        """
        Extracts text from PDF bytes using PyMuPDF (fitz).
        Returns: (list of page texts, page 1 = index 0; page count)
        """
        start = time.time()
        page_texts: List[str] = []
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            for page in doc:
                text = page.get_text("text") or ""
                page_texts.append(text.strip())
            page_count = len(doc)

        elapsed = (time.time() - start) * 1000.0
        self.logger.info("Extracted text from PDF (%d pages, %.1f ms)", page_count, elapsed)
        return page_texts, page_count

    def process(self, content: bytes | str, metadata: DocumentMetadata) -> List[ProcessedChunk]:
        pdf_bytes = decode_content(content)
        try:
            pages, page_count = self.extract_text_from_pdf(pdf_bytes)
        except Exception as e:
            # malformed / encrypted PDFs are reported, not fatal
            self.logger.error("Failed to extract text from PDF '%s': %s", metadata.file_name, e)
            return []

        text = "\n\n".join(p for p in pages if p)
        if not text.strip():
            self.logger.warning("No text extracted from PDF '%s' (%d pages)", metadata.file_name, page_count)
            return []

        return self._to_chunks(text, metadata, extra={"page_count": page_count})
