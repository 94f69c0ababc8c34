from .loader import load_config
from .models import (
    ConversionConfig,
    DocPdfConfig,
    RenderConfig,
)

__all__ = [
    "ConversionConfig",
    "DocPdfConfig",
    "RenderConfig",
    "load_config",
]
