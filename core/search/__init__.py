# Path: core/search/__init__.py
# Purpose: Package initializer for filter compilation, perceptual matching, and the search pipeline.
# Layer: core/search.
# Details: Exposes the compiler, the post-filter, and the pipeline entrypoint.

from .filters import FilterCompiler, validate_criteria
from .matching import PerceptualMatchFilter
from .pipeline import ClipSearchPipeline

__all__ = [
    "ClipSearchPipeline",
    "FilterCompiler",
    "PerceptualMatchFilter",
    "validate_criteria",
]
