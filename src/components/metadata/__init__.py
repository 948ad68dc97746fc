"""
Metadata component - custom records with pattern/generic fallback.
"""

from ._impl import MetadataResolver, merge_record
from .component import run_resolve
from .models import ResolveMetadataInput, ResolveMetadataOutput
from .ports import MetadataLookupPort

__all__ = [
    "MetadataLookupPort",
    "MetadataResolver",
    "ResolveMetadataInput",
    "ResolveMetadataOutput",
    "merge_record",
    "run_resolve",
]
