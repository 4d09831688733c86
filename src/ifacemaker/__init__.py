"""Go interface generator.

Exposes a simple API:
    Maker(MakerOptions(...)).parse_source(src, filename); .make_interface()
"""

from .maker import Maker  # noqa: F401
from .models import ImportedPackage, MakerOptions, Method  # noqa: F401

__all__ = ["Maker", "MakerOptions", "Method", "ImportedPackage"]
