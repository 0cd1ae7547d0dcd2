"""FinWise: LLM agent pipeline for personal finance statements."""

__version__ = "0.1.0"
