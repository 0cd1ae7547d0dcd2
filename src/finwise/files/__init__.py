from .loader import extract_text, load_files, validate_upload

__all__ = ["extract_text", "load_files", "validate_upload"]
