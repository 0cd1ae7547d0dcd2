"""Turns uploaded statement files into ParsedFile text for the parser agent."""
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd
import pdfplumber
import pypdf

from finwise.config.settings import AppSettings, get_settings
from finwise.models import ParsedFile
from finwise.utils.logger import get_logger
from finwise.utils.exceptions import FileValidationError, PDFError

logger = get_logger()

TEXT_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")
EXCEL_ENGINES = {"xlsx": "openpyxl", "xls": "xlrd"}


def validate_upload(path: Path, settings: Optional[AppSettings] = None) -> str:
    """Check extension and size; return the lower-case extension.

    Raises:
        FileValidationError: If the file is missing, has an unsupported
            extension, or is larger than the upload limit
    """
    settings = settings or get_settings()
    path = Path(path)

    if not path.is_file():
        raise FileValidationError(f"{path.name}: file not found")

    extension = path.suffix.lower().lstrip(".")
    if extension not in settings.allowed_extensions:
        allowed = ", ".join(settings.allowed_extensions)
        raise FileValidationError(f"{path.name}: unsupported file type '{extension}' (allowed: {allowed})")

    max_bytes = settings.max_file_size_mb * 1024 * 1024
    size = path.stat().st_size
    if size > max_bytes:
        raise FileValidationError(
            f"{path.name}: file is {size / (1024 * 1024):.1f} MB, limit is {settings.max_file_size_mb} MB"
        )

    return extension


def _read_text(path: Path) -> str:
    for encoding in TEXT_ENCODINGS:
        try:
            return path.read_text(encoding=encoding)
        except UnicodeError:
            logger.debug(f"{path.name} is not {encoding}, trying next encoding")
    raise FileValidationError(f"{path.name}: could not decode text")


def _extract_with_pdfplumber(path: Path) -> Optional[str]:
    try:
        with pdfplumber.open(path) as pdf:
            text_parts = [page.extract_text() for page in pdf.pages]
            text = "\n".join(part for part in text_parts if part)
            logger.debug(f"pdfplumber extracted {len(text)} chars from {len(pdf.pages)} pages in {path.name}")
            return text or None
    except Exception as e:
        logger.warning(f"pdfplumber extraction failed for {path.name}: {e}")
        return None


def _extract_with_pypdf(path: Path) -> Optional[str]:
    try:
        with open(path, "rb") as f:
            reader = pypdf.PdfReader(f)
            text_parts = [page.extract_text() for page in reader.pages]
            text = "\n".join(part for part in text_parts if part)
            logger.debug(f"pypdf extracted {len(text)} chars from {len(reader.pages)} pages in {path.name}")
            return text or None
    except Exception as e:
        logger.error(f"pypdf extraction failed for {path.name}: {e}")
        return None


def extract_pdf_text(path: Path) -> str:
    """pdfplumber first, pypdf as fallback.

    Raises:
        PDFError: If neither library finds any text (scanned or corrupted file)
    """
    text = _extract_with_pdfplumber(path)
    if not text or not text.strip():
        logger.info(f"pdfplumber found no text, trying pypdf for {path.name}")
        text = _extract_with_pypdf(path)

    if not text or not text.strip():
        raise PDFError(f"{path.name}: no extractable text. File may be scanned or corrupted.")
    return text


def extract_excel_text(path: Path, extension: str) -> str:
    """Every sheet rendered as CSV under a ``--- Sheet: name ---`` header."""
    try:
        sheets = pd.read_excel(path, sheet_name=None, header=None, engine=EXCEL_ENGINES[extension])
    except (ValueError, OSError, ImportError) as e:
        raise FileValidationError(f"{path.name}: could not read workbook: {e}")

    parts = []
    for name, frame in sheets.items():
        csv_text = frame.dropna(how="all").to_csv(index=False, header=False)
        parts.append(f"\n--- Sheet: {name} ---\n{csv_text}")
    return "".join(parts)


def extract_text(path: Path, settings: Optional[AppSettings] = None) -> ParsedFile:
    """Validate one upload and extract its text."""
    path = Path(path)
    extension = validate_upload(path, settings)

    if extension == "pdf":
        text = extract_pdf_text(path)
    elif extension in EXCEL_ENGINES:
        text = extract_excel_text(path, extension)
    else:
        text = _read_text(path)

    logger.info(f"Extracted {len(text)} characters from {path.name}")
    return ParsedFile(filename=path.name, text=text, file_type=extension)


def load_files(paths, settings: Optional[AppSettings] = None) -> Tuple[List[ParsedFile], List[Tuple[str, str]]]:
    """Extract every accepted file.

    Returns:
        (parsed files, rejects) where each reject is ``(filename, reason)``
    """
    parsed, rejected = [], []
    for raw_path in paths:
        path = Path(raw_path)
        try:
            parsed.append(extract_text(path, settings))
        except (FileValidationError, PDFError) as e:
            logger.warning(f"Rejected {path.name}: {e}")
            rejected.append((path.name, str(e)))
    return parsed, rejected
