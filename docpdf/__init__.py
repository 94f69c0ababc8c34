"""docpdf: copy a tree of Word documents as PDFs."""

__version__ = "0.1.0"
