from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str = "seo-resolution"
    rules_version: str = "1"
    site_id: str = "default"


class StoreRules(BaseModel):
    url_env: str = "SEO_STORE_URL"
    default_url: str | None = None
    timeout_seconds: float = Field(default=5.0, gt=0)


class BreakerRules(BaseModel):
    failure_threshold: int = Field(default=5, ge=1)
    recovery_timeout_seconds: float = Field(default=60.0, gt=0)


class RetryRules(BaseModel):
    max_attempts: int = Field(default=2, ge=1)
    base_delay_seconds: float = Field(default=1.0, ge=0)
    max_jitter_seconds: float = Field(default=1.0, ge=0)


class RedirectRules(BaseModel):
    max_chain_depth: int = Field(default=5, ge=1)
    default_status_code: int = 301
    allowed_status_codes: list[int] = Field(default_factory=lambda: [301, 302, 303, 307, 308])
    skip_prefixes: list[str] = Field(
        default_factory=lambda: [
            "/api/",
            "/admin/",
            "/_next/",
            "/favicon.ico",
            "/robots.txt",
            "/sitemap.xml",
            "/manifest.json",
            "/sw.js",
            "/.well-known/",
            "/public/",
            "/uploads/",
            "/health",
            "/docs",
            "/openapi.json",
        ]
    )
    protected_target_prefixes: list[str] = Field(default_factory=lambda: ["/admin/", "/api/"])
    allowed_external_domains: list[str] = Field(default_factory=list)
    follow_chains: bool = False
    preserve_utm_params: bool = True

    @field_validator("allowed_status_codes")
    @classmethod
    def _redirect_codes_only(cls, value: list[int]) -> list[int]:
        bad = [c for c in value if c not in (301, 302, 303, 307, 308)]
        if bad:
            raise ValueError(f"Not redirect status codes: {bad}")
        return value


class FallbackVariantRules(BaseModel):
    keywords: list[str]
    title: str
    description: str


class FallbackSectionRules(BaseModel):
    key: str
    match: list[str] = Field(default_factory=list)
    title: str
    description: str
    social_title: str | None = None
    social_description: str | None = None
    social_image: str | None = None
    variants: list[FallbackVariantRules] = Field(default_factory=list)


def _default_sections() -> list[FallbackSectionRules]:
    return [
        FallbackSectionRules(
            key="home",
            title="{brand} - Digital Products & Engineering",
            description=(
                "{brand} designs and builds digital products for modern businesses. "
                "Explore our services, work and insights."
            ),
            social_title="{brand} - Digital Products & Engineering",
        ),
        FallbackSectionRules(
            key="services",
            match=["services"],
            title="Professional Services | {brand}",
            description=(
                "Technology services from {brand}: strategy, design, web and mobile "
                "development for growing businesses."
            ),
            variants=[
                FallbackVariantRules(
                    keywords=["ai", "ml"],
                    title="AI & ML Services | {brand}",
                    description=(
                        "AI and machine learning services from {brand} to automate "
                        "workflows and turn data into decisions."
                    ),
                ),
                FallbackVariantRules(
                    keywords=["web3", "blockchain"],
                    title="Web3 & Blockchain Development | {brand}",
                    description=(
                        "Web3 and blockchain development from {brand}: smart contracts, "
                        "decentralized apps and integrations."
                    ),
                ),
                FallbackVariantRules(
                    keywords=["mobile"],
                    title="Mobile App Development | {brand}",
                    description=(
                        "iOS and Android app development from {brand}, from prototype "
                        "to store release."
                    ),
                ),
                FallbackVariantRules(
                    keywords=["web"],
                    title="Web Development Services | {brand}",
                    description=(
                        "Full-stack web development from {brand} with modern frameworks "
                        "and scalable architecture."
                    ),
                ),
            ],
        ),
        FallbackSectionRules(
            key="about",
            match=["about", "about-us"],
            title="About {brand}",
            description=(
                "Learn about {brand}: who we are, how we work and the teams behind "
                "our products."
            ),
        ),
        FallbackSectionRules(
            key="contact",
            match=["contact", "contact-us"],
            title="Contact {brand} | Get In Touch",
            description="Contact {brand} to discuss your project. We usually reply within one business day.",
        ),
        FallbackSectionRules(
            key="blog",
            match=["blog"],
            title="Blog | {brand}",
            description="Articles, guides and engineering notes from the {brand} team.",
        ),
    ]


class FallbackRules(BaseModel):
    brand_name: str = "Example Studio"
    robots: str = "index,follow"
    generic_title_template: str = "{title} | {brand}"
    generic_description_template: str = (
        "Discover {title_lower} from {brand}. Read more about our work and services."
    )
    home_aliases: list[str] = Field(default_factory=lambda: ["", "/", "home"])
    sections: list[FallbackSectionRules] = Field(default_factory=_default_sections)


class HealthRules(BaseModel):
    window_seconds: float = Field(default=3600.0, gt=0)
    unhealthy_error_rate: float = Field(default=0.1, gt=0, le=1)
    warning_error_rate: float = Field(default=0.05, ge=0, le=1)
    many_failures_threshold: int = Field(default=50, ge=1)
    max_events_per_key: int = Field(default=500, ge=1)
    max_keys: int = Field(default=10_000, ge=1)
    store_ping_timeout_seconds: float = Field(default=2.0, gt=0)


class ObservabilityRules(BaseModel):
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class EnvRules(BaseModel):
    required: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules = Field(default_factory=ProjectRules)
    store: StoreRules = Field(default_factory=StoreRules)
    breaker: BreakerRules = Field(default_factory=BreakerRules)
    retry: RetryRules = Field(default_factory=RetryRules)
    redirects: RedirectRules = Field(default_factory=RedirectRules)
    fallback: FallbackRules = Field(default_factory=FallbackRules)
    health: HealthRules = Field(default_factory=HealthRules)
    observability: ObservabilityRules = Field(default_factory=ObservabilityRules)
    env: EnvRules = Field(default_factory=EnvRules)
