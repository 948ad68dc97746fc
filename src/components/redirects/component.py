"""
Redirects component - request-time resolution and pre-write validation.

Invariants:
- I1: Resolution never raises; failures resolve to NoRedirect
- I2: Excluded prefixes never reach the store
- I3: No circular redirects are accepted
- I4: No chain longer than max_chain_depth is accepted
- I5: Cannot redirect to self
"""

from __future__ import annotations

from src.core.errors import ResolutionError, as_resolution_error
from src.core.ports.time import ClockPort
from src.rules.models import RedirectRules

from ._impl import OPERATION_VALIDATE, RedirectResolver, build_redirect_config
from .models import (
    BatchResolveInput,
    BatchResolveOutput,
    RedirectValidationError,
    ResolveOutput,
    ResolveRedirectInput,
    ValidateOutput,
    ValidateRedirectInput,
)
from .ports import RedirectLookupPort


def _create_resolver(
    store: RedirectLookupPort,
    clock: ClockPort,
    rules: RedirectRules | None,
) -> RedirectResolver:
    """Create redirect resolver from ports."""
    return RedirectResolver(store=store, clock=clock, config=build_redirect_config(rules))


def _error_from(exc: ResolutionError) -> list[RedirectValidationError]:
    issues = [i for i in getattr(exc, "issues", []) if isinstance(i, RedirectValidationError)]
    if issues:
        return issues
    return [RedirectValidationError(code=exc.kind.value, message=exc.message, field="to")]


# --- Component Entry Points ---


async def run_resolve(
    inp: ResolveRedirectInput,
    *,
    store: RedirectLookupPort,
    clock: ClockPort,
    rules: RedirectRules | None = None,
) -> ResolveOutput:
    """
    Resolve a request path.

    Args:
        inp: Input containing path and site id.
        store: Redirect lookup port (normally the guarded store).
        clock: Clock port for log timestamps.
        rules: Optional redirect rules.

    Returns:
        ResolveOutput with the redirect decision.
    """
    resolver = _create_resolver(store, clock, rules)
    outcome = await resolver.resolve(inp.path, inp.site_id)
    return ResolveOutput(outcome=outcome, errors=[], success=True)


async def run_batch_resolve(
    inp: BatchResolveInput,
    *,
    store: RedirectLookupPort,
    clock: ClockPort,
    rules: RedirectRules | None = None,
) -> BatchResolveOutput:
    """Resolve many paths concurrently."""
    resolver = _create_resolver(store, clock, rules)
    outcomes = await resolver.batch_resolve(inp.paths, inp.site_id)
    return BatchResolveOutput(outcomes=outcomes, errors=[], success=True)


async def run_validate(
    inp: ValidateRedirectInput,
    *,
    store: RedirectLookupPort,
    clock: ClockPort,
    rules: RedirectRules | None = None,
) -> ValidateOutput:
    """
    Validate a redirect before it is written.

    Rule violations, loops, overlong chains and store failures all end up in
    `errors`; a write must only proceed when `success` is True.
    """
    resolver = _create_resolver(store, clock, rules)

    try:
        chain = await resolver.validate_redirect(inp.record)
    except Exception as exc:
        err = as_resolution_error(exc, path=inp.record.from_path, operation=OPERATION_VALIDATE)
        return ValidateOutput(
            record=inp.record,
            errors=_error_from(err),
            error_kind=err.kind.value,
            success=False,
        )

    return ValidateOutput(record=inp.record, chain=chain, errors=[], success=True)
