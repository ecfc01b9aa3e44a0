from src.extractors.base import ExtractionSource, MediaRecord, MediaType
from src.extractors.meta_tags import extract_meta_tags
from src.extractors.structured_data import extract_structured_data

__all__ = [
    "ExtractionSource",
    "MediaRecord",
    "MediaType",
    "extract_meta_tags",
    "extract_structured_data",
]
