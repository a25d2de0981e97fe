from __future__ import annotations

RECONCILE_SYSTEM_PROMPT = (
    "You are a space industry data analyst for a professional space intelligence platform. "
    "Your job is to verify and update module data based on your knowledge and recent news articles. "
    "Only update values you are confident about. If you are unsure, keep the existing value and "
    "note the uncertainty. Never fabricate data. "
    "You MUST output ONLY one raw JSON object without markdown code fences."
)

DEFAULT_MODULE_INSTRUCTIONS = "Verify and update data for the {module} module."

MODULE_INSTRUCTIONS: dict[str, str] = {
    "space-stations": (
        "Verify and update space station data across all sections:\n\n"
        "ACTIVE STATIONS (section: active-stations):\n"
        "- ISS status: orbit altitude, anomalies, expected deorbit timeline\n"
        "- Tiangong station: current modules, operational status\n\n"
        "CREW (section: crew):\n"
        "- Current ISS and Tiangong crew: names, nationalities, missions, arrival and return dates\n\n"
        "COMMERCIAL STATIONS (section: commercial-stations):\n"
        "- Axiom Station, Vast Haven-1, Orbital Reef, Starlab: milestones, launch targets, funding"
    ),
    "space-economy": (
        "Verify and update space economy data across these sections:\n\n"
        "MARKET SEGMENTS (section: market-segments): global market size, segment revenue, growth rates\n"
        "QUARTERLY VC (section: quarterly-vc): recent funding deals, deal counts, totals per quarter\n"
        "GOVERNMENT BUDGETS (section: government-budgets): space budgets by country and agency\n"
        "LAUNCH COST TRENDS (section: launch-cost-trends): cost per kg to LEO for major vehicles; "
        "each entry needs vehicle, operator, year, costPerKgLEO, payload, reusable"
    ),
    "startups": (
        "Verify and update space startup data:\n"
        "- Recently funded space startups (funding rounds, amounts, investors)\n"
        "- Company status changes (IPO, acquisition, shutdown, pivot)\n"
        "- New notable space startups and funding trends"
    ),
    "cislunar": (
        "Verify and update cislunar activity data:\n"
        "- Artemis program schedule and hardware status\n"
        "- CLPS lander missions: manifest, outcomes, upcoming launches\n"
        "- Gateway module development milestones"
    ),
    "launch-vehicles": (
        "Verify and update launch vehicle data:\n"
        "- Operational status, flight counts and success rates\n"
        "- First-flight targets for vehicles in development\n"
        "- Retirements and major configuration changes"
    ),
    "ground-stations": (
        "Verify and update ground station network data:\n"
        "- Operators, antenna counts and site locations\n"
        "- New sites, acquisitions and service changes"
    ),
}

OUTPUT_CONTRACT = """Respond with exactly one JSON object (no markdown code fences):
{{
  "updates": [
    {{
      "contentKey": "{module}:section-name",
      "section": "section-name",
      "data": {{ "...": "complete updated data object" }},
      "confidence": 0.9,
      "changeNotes": "Brief description of what changed"
    }}
  ],
  "newItems": [
    {{
      "contentKey": "{module}:new-section",
      "section": "new-section",
      "data": {{ "...": "new data object" }},
      "confidence": 0.8
    }}
  ],
  "removals": [],
  "notes": "Summary of changes made and any uncertainties"
}}"""
