from .options import DEFAULT_OPTIONS, ConversionOptions

__all__ = ["ConversionOptions", "DEFAULT_OPTIONS"]
