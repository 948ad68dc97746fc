"""
RedirectResolver - per-request redirect resolution with chain validation.

Key behaviors:
- Excluded prefixes (/api/, /admin/, static assets...) never touch the store
- Exact source match first, then the slug variant (leading "/" stripped)
- Any lookup failure fails open: the request proceeds without a redirect
- Chains are only followed when follow_chains is on, and stop at a cycle,
  an external target, a failed lookup or max_chain_depth hops
- Authoring validation rejects loops and chains longer than max_chain_depth
  reachable forward from the new target; store failures there propagate
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from urllib.parse import urlparse

from src.core.entities import PATH_MAX_LENGTH, RedirectRecord
from src.core.errors import (
    RedirectChainTooLongError,
    RedirectLoopError,
    ValidationError,
    as_resolution_error,
    failure_extra,
)
from src.core.outcomes import NoRedirect, Redirect, RedirectOutcome
from src.core.ports.time import ClockPort
from src.rules.models import RedirectRules

from .models import RedirectConfig, RedirectValidationError
from .ports import RedirectLookupPort

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = RedirectConfig()

OPERATION_LOOKUP = "redirect_lookup"
OPERATION_VALIDATE = "redirect_validate"


def build_redirect_config(rules: RedirectRules | None = None) -> RedirectConfig:
    """Build redirect config from rules."""
    if rules is None:
        return RedirectConfig()

    return RedirectConfig(
        max_chain_depth=rules.max_chain_depth,
        default_status_code=rules.default_status_code,
        allowed_status_codes=tuple(rules.allowed_status_codes),
        skip_prefixes=tuple(rules.skip_prefixes),
        protected_target_prefixes=tuple(rules.protected_target_prefixes),
        allowed_external_domains=tuple(d.lower() for d in rules.allowed_external_domains),
        follow_chains=rules.follow_chains,
        preserve_utm_params=rules.preserve_utm_params,
    )


# --- Path Helpers ---


def normalize_path(path: str) -> str:
    """Normalize a path for comparison."""
    if not path:
        return "/"

    # Remove trailing slash (except for root)
    path = path.rstrip("/") or "/"

    # Ensure leading slash
    if not path.startswith("/"):
        path = "/" + path

    return path.lower()


def slug_variant(path: str) -> str | None:
    """The path without its leading slash, or None when there is none."""
    slug = path.lstrip("/")
    if not slug or slug == path:
        return None
    return slug


def is_internal_path(path: str) -> bool:
    """Check if path is internal (not a full URL)."""
    if not path:
        return False

    if "://" in path:
        return False

    # Protocol-relative URL
    if path.startswith("//"):
        return False

    lower_path = path.lower()
    dangerous_protocols = ("javascript:", "data:", "vbscript:", "file:")
    if any(lower_path.startswith(proto) for proto in dangerous_protocols):
        return False

    return True


def is_absolute_url(url: str) -> bool:
    """Check if URL is absolute (has scheme)."""
    parsed = urlparse(url)
    return bool(parsed.scheme and parsed.netloc)


def is_excluded(path: str, config: RedirectConfig = DEFAULT_CONFIG) -> bool:
    """Whether `path` bypasses redirect resolution entirely."""
    return any(path.startswith(prefix) for prefix in config.skip_prefixes)


# --- Record Checks ---


def check_redirect_record(
    record: RedirectRecord,
    config: RedirectConfig = DEFAULT_CONFIG,
) -> list[RedirectValidationError]:
    """
    Check a redirect against the authoring rules.

    Covers everything that can be decided without the store; chain checks
    happen in RedirectResolver.validate_redirect.
    """
    errors: list[RedirectValidationError] = []
    source = record.from_path
    target = record.to_path

    for value, name in ((source, "from"), (target, "to")):
        if not value:
            errors.append(
                RedirectValidationError(
                    code=f"{name}_required",
                    message=f"'{name}' path is required",
                    field=name,
                )
            )
        elif len(value) > PATH_MAX_LENGTH:
            errors.append(
                RedirectValidationError(
                    code=f"{name}_too_long",
                    message=f"'{name}' path must be at most {PATH_MAX_LENGTH} characters",
                    field=name,
                )
            )

    if source and target and normalize_path(source) == normalize_path(target):
        errors.append(
            RedirectValidationError(
                code="self_redirect",
                message="Redirect cannot point to itself",
                field="to",
            )
        )

    if record.status_code not in config.allowed_status_codes:
        errors.append(
            RedirectValidationError(
                code="invalid_status_code",
                message=f"Status code must be one of {list(config.allowed_status_codes)}",
                field="status_code",
            )
        )

    if target:
        errors.extend(_check_target(target, config))

    return errors


def _check_target(target: str, config: RedirectConfig) -> list[RedirectValidationError]:
    if is_internal_path(target):
        if not target.startswith("/"):
            return [
                RedirectValidationError(
                    code="target_must_start_with_slash",
                    message="Internal target must start with /",
                    field="to",
                )
            ]
        lowered = target.lower()
        if any(lowered.startswith(p) for p in config.protected_target_prefixes):
            return [
                RedirectValidationError(
                    code="protected_target",
                    message="Cannot redirect to admin or API routes",
                    field="to",
                )
            ]
        return []

    parsed = urlparse(target)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return [
            RedirectValidationError(
                code="invalid_target_scheme",
                message="External target must be an absolute http(s) URL",
                field="to",
            )
        ]

    host = (parsed.hostname or "").lower()
    if host not in config.allowed_external_domains:
        return [
            RedirectValidationError(
                code="external_domain_not_allowed",
                message=f"Redirects to {host} are not allowed",
                field="to",
            )
        ]
    return []


# --- Resolver ---


class RedirectResolver:
    """Resolves request paths against stored redirects."""

    def __init__(
        self,
        store: RedirectLookupPort,
        clock: ClockPort,
        config: RedirectConfig | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> RedirectConfig:
        return self._config

    async def resolve(self, path: str, site_id: str) -> RedirectOutcome:
        """
        Decide whether `path` redirects. Never raises.

        Returns NoRedirect when the path is excluded, has no redirect, or the
        lookup failed.
        """
        if is_excluded(path, self._config):
            return NoRedirect(reason="excluded")

        try:
            record = await self._store.find_redirect(site_id, path)
            if record is None:
                slug = slug_variant(path)
                if slug is not None:
                    record = await self._store.find_redirect(site_id, slug)
        except Exception as exc:
            err = as_resolution_error(exc, path=path, operation=OPERATION_LOOKUP)
            logger.info(
                "Redirect lookup for %s failed (%s), continuing without redirect",
                path,
                err.kind.value,
                extra=failure_extra(
                    err, path=path, operation=OPERATION_LOOKUP, timestamp=self._clock.now_utc()
                ),
            )
            return NoRedirect(reason=err.kind.value)

        if record is None:
            return NoRedirect(reason="not_found")

        if self._config.follow_chains:
            return await self._follow(site_id, path, record)

        return Redirect(to=record.to_path, status_code=record.status_code, matched_from=path)

    async def batch_resolve(
        self, paths: Iterable[str], site_id: str
    ) -> dict[str, RedirectOutcome]:
        """Resolve several paths concurrently; each fails open on its own."""
        unique = list(dict.fromkeys(paths))
        outcomes = await asyncio.gather(*(self.resolve(p, site_id) for p in unique))
        return dict(zip(unique, outcomes, strict=True))

    async def validate_redirect(self, record: RedirectRecord) -> list[str]:
        """
        Check that `record` may be written.

        Returns the chain reachable from the new record (source first).

        Raises:
            ValidationError: the record breaks an authoring rule.
            RedirectLoopError: the chain from the target leads back to a visited path.
            RedirectChainTooLongError: the chain is longer than max_chain_depth.
            ResolutionError: a store lookup failed.
        """
        errors = check_redirect_record(record, self._config)
        if errors:
            raise ValidationError(
                "; ".join(e.message for e in errors),
                issues=errors,
                path=record.from_path,
                operation=OPERATION_VALIDATE,
            )

        visited = {normalize_path(record.from_path)}
        chain = [record.from_path]
        current = record.to_path

        for _ in range(self._config.max_chain_depth):
            if normalize_path(current) in visited:
                raise RedirectLoopError(
                    chain=[*chain, current],
                    path=record.from_path,
                    operation=OPERATION_VALIDATE,
                )
            visited.add(normalize_path(current))
            chain.append(current)

            if is_absolute_url(current):
                return chain

            nxt = await self._store.find_redirect(record.site_id, current)
            if nxt is None:
                return chain
            current = nxt.to_path

        raise RedirectChainTooLongError(
            chain=[*chain, current],
            max_depth=self._config.max_chain_depth,
            path=record.from_path,
            operation=OPERATION_VALIDATE,
        )

    async def _follow(self, site_id: str, path: str, first: RedirectRecord) -> Redirect:
        visited = {normalize_path(path), normalize_path(first.to_path)}
        current = first
        hops = 1

        while hops < self._config.max_chain_depth:
            if is_absolute_url(current.to_path):
                break
            try:
                nxt = await self._store.find_redirect(site_id, current.to_path)
            except Exception as exc:
                err = as_resolution_error(exc, path=current.to_path, operation=OPERATION_LOOKUP)
                logger.info(
                    "Stopped following redirect chain at %s (%s)",
                    current.to_path,
                    err.kind.value,
                    extra=failure_extra(
                        err,
                        path=current.to_path,
                        operation=OPERATION_LOOKUP,
                        timestamp=self._clock.now_utc(),
                    ),
                )
                break
            if nxt is None or normalize_path(nxt.to_path) in visited:
                break
            visited.add(normalize_path(nxt.to_path))
            current = nxt
            hops += 1

        return Redirect(
            to=current.to_path,
            status_code=first.status_code,
            matched_from=path,
            hops=hops,
        )
