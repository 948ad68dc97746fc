"""
Metadata component - tiered display metadata resolution.

Invariants:
- I1: Resolution never raises and always returns every field
- I2: Social title/description inherit the page title/description
- I3: Fallback values depend only on the path
"""

from __future__ import annotations

from src.components.fallback import FallbackProvider, build_fallback_config
from src.core.ports.time import ClockPort
from src.rules.models import FallbackRules

from ._impl import MetadataResolver
from .models import ResolveMetadataInput, ResolveMetadataOutput
from .ports import MetadataLookupPort


async def run_resolve(
    inp: ResolveMetadataInput,
    *,
    store: MetadataLookupPort,
    clock: ClockPort,
    fallback: FallbackProvider | None = None,
    rules: FallbackRules | None = None,
) -> ResolveMetadataOutput:
    """
    Resolve metadata for a page.

    Args:
        inp: Input containing path and site id.
        store: Metadata lookup port (normally the guarded store).
        clock: Clock port for log timestamps.
        fallback: Long-lived provider to reuse its memo map.
        rules: Fallback rules, used only when no provider is passed.
    """
    provider = fallback or FallbackProvider(build_fallback_config(rules))
    resolver = MetadataResolver(store=store, fallback=provider, clock=clock)
    metadata, reason = await resolver.resolve_with_reason(inp.path, inp.site_id)
    return ResolveMetadataOutput(metadata=metadata, fallback_reason=reason, success=True)
