"""
Domain counters exposed on /metrics next to the HTTP instrumentation.
"""
from prometheus_client import Counter

# Which fallback stage produced each parse: strict | loose | heuristic
PARSER_STAGE_TOTAL = Counter(
    "cinemood_parser_stage_total",
    "Structured-query parses by the generator stage that produced them",
    ["stage"],
)

# Catalog fetches that were tolerated as empty results
CATALOG_FAILURES_TOTAL = Counter(
    "cinemood_catalog_failures_total",
    "Catalog requests that failed and were treated as empty",
    ["endpoint"],
)
