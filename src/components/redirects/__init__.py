"""
Redirects component - redirect resolution and chain validation.
"""

from ._impl import (
    RedirectResolver,
    build_redirect_config,
    check_redirect_record,
    is_absolute_url,
    is_excluded,
    is_internal_path,
    normalize_path,
    slug_variant,
)
from .component import run_batch_resolve, run_resolve, run_validate
from .models import (
    BatchResolveInput,
    BatchResolveOutput,
    RedirectConfig,
    RedirectValidationError,
    ResolveOutput,
    ResolveRedirectInput,
    ValidateOutput,
    ValidateRedirectInput,
)
from .ports import RedirectLookupPort

__all__ = [
    # Entry points
    "run_batch_resolve",
    "run_resolve",
    "run_validate",
    # Input models
    "BatchResolveInput",
    "ResolveRedirectInput",
    "ValidateRedirectInput",
    # Output models
    "BatchResolveOutput",
    "RedirectValidationError",
    "ResolveOutput",
    "ValidateOutput",
    # Ports
    "RedirectLookupPort",
    # _impl re-exports
    "RedirectConfig",
    "RedirectResolver",
    "build_redirect_config",
    "check_redirect_record",
    "is_absolute_url",
    "is_excluded",
    "is_internal_path",
    "normalize_path",
    "slug_variant",
]
