"""Text resolution for uploaded invoice content.

The engine itself only works on text. This module turns the uploaded
content into that text: delimited files are decoded as UTF-8, and PDF
binaries are handed to pypdf, which stands in for the external
text-extraction collaborator. PDF structure is never interpreted here.
"""

import io
import logging

from pypdf import PdfReader

from invoice_parser.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


def decode_text(content: bytes, encoding: str = "utf-8") -> str:
    """Decode uploaded bytes, dropping a UTF-8 BOM.

    Raises:
        ExtractionError: If the bytes are not valid text (PARSE_002)
    """
    try:
        text = content.decode(encoding)
    except UnicodeDecodeError as e:
        raise ExtractionError(
            "PARSE_002", details={"encoding": encoding, "position": e.start}
        ) from e
    return text.lstrip("\ufeff")


class PDFExtractor:
    """Wrapper around pypdf for plain-text extraction.

    All processing happens in-memory without creating temporary files.
    Pages are joined with newlines so the line structure the bank
    strategies rely on is preserved.

    Example:
        >>> extractor = PDFExtractor()
        >>> text = extractor.extract_text(pdf_bytes)
    """

    def is_pdf(self, content: bytes) -> bool:
        """Check the PDF magic bytes."""
        return content.lstrip()[:4] == PDF_MAGIC

    def extract_text(self, pdf_bytes: bytes, password: str | None = None) -> str:
        """Extract the text of every page.

        Args:
            pdf_bytes: PDF file content as bytes
            password: Optional password for encrypted PDFs

        Returns:
            Page texts joined by newlines

        Raises:
            ExtractionError: If the PDF is corrupted (PARSE_002), has no
                text (PARSE_003) or cannot be decrypted (PARSE_004)
        """
        if not pdf_bytes:
            raise ExtractionError("PARSE_003", details={"reason": "empty input"})

        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            if reader.is_encrypted:
                # Some PDFs are encrypted but use an empty user password.
                if not reader.decrypt(password or ""):
                    raise ExtractionError("PARSE_004")
            pages = [(page.extract_text() or "") for page in reader.pages]
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError("PARSE_002", details={"reason": str(e)}) from e

        text = "\n".join(pages)
        if not text.strip():
            raise ExtractionError("PARSE_003", details={"pages": len(pages)})

        logger.debug("Extracted %d characters from %d PDF pages", len(text), len(pages))
        return text
