"""Built-in policy set for the space-industry content modules."""

from __future__ import annotations

from freshkeeper.models.policy import FreshnessPolicy, PolicyTable


def _policy(ttl_hours: float, priority: str, source: str, *keywords: str) -> FreshnessPolicy:
    return FreshnessPolicy(
        ttl_hours=ttl_hours,
        priority=priority,  # type: ignore[arg-type]
        refresh_source=source,  # type: ignore[arg-type]
        keywords=tuple(keywords),
    )


DAY = 24
WEEK = 7 * DAY
MONTH = 30 * DAY

DEFAULT_POLICY_TABLE = PolicyTable(
    policies={
        # Critical: changes daily
        "space-stations": _policy(
            DAY, "critical", "both",
            "ISS", "space station", "Tiangong", "crew", "astronaut", "cosmonaut", "Axiom", "Orbital Reef",
        ),
        # High: changes with the weekly news cycle
        "constellations": _policy(
            WEEK, "high", "api",
            "Starlink", "OneWeb", "Kuiper", "constellation", "satellite deploy",
        ),
        "space-economy": _policy(
            WEEK, "high", "ai-research",
            "space economy", "space market", "venture capital", "space investment", "space IPO",
            "space funding",
        ),
        "startups": _policy(
            WEEK, "high", "ai-research",
            "startup", "funding round", "Series A", "Series B", "space startup", "seed round",
            "space venture",
        ),
        "space-defense": _policy(
            WEEK, "high", "both",
            "Space Force", "space defense", "SDA", "military space", "space command", "NRO",
            "defense contract",
        ),
        "cislunar": _policy(
            WEEK, "high", "ai-research",
            "Artemis", "lunar", "moon mission", "Gateway", "CLPS", "cislunar", "Lunar Pathfinder",
        ),
        "compliance": _policy(
            WEEK, "high", "ai-research",
            "FCC", "FAA license", "space law", "space regulation", "ITU", "Artemis Accords",
            "space treaty",
        ),
        # Moderate: changes monthly
        "asteroid-watch": _policy(
            WEEK, "moderate", "api",
            "asteroid", "NEO", "near-Earth", "DART", "planetary defense",
        ),
        "patents": _policy(
            MONTH, "moderate", "api",
            "space patent", "space IP", "patent filing", "space technology patent",
        ),
        "launch-vehicles": _policy(
            MONTH, "moderate", "ai-research",
            "Falcon 9", "Starship", "New Glenn", "Vulcan", "Ariane", "launch vehicle", "rocket",
            "first flight",
        ),
        "mars-planner": _policy(
            MONTH, "moderate", "ai-research",
            "Mars", "Perseverance", "Curiosity", "Mars mission", "Mars launch", "ExoMars",
        ),
        "spaceports": _policy(
            MONTH, "moderate", "ai-research",
            "spaceport", "launch site", "launch pad", "Cape Canaveral", "Boca Chica", "launch complex",
        ),
        "space-manufacturing": _policy(
            MONTH, "moderate", "ai-research",
            "space manufacturing", "in-space production", "Varda", "Redwire", "space factory",
            "microgravity",
        ),
        "space-tourism": _policy(
            MONTH, "moderate", "ai-research",
            "space tourism", "Blue Origin", "Virgin Galactic", "SpaceX tourism", "Axiom mission",
            "private astronaut",
        ),
        "supply-chain": _policy(
            MONTH, "moderate", "ai-research",
            "space supply chain", "space components", "satellite manufacturing", "launch supply",
        ),
        # Low: rarely changes
        "ground-stations": _policy(
            60 * DAY, "low", "ai-research",
            "ground station", "DSN", "KSAT", "AWS Ground Station", "antenna network",
        ),
    }
)
