"""
Contributions proxy service package.

The service fronts the GitHub GraphQL API for browser clients, serving a
user's contribution calendar flattened to one entry per day. A single
12-hour result slot keeps upstream traffic to roughly one call per window.

Structure:
- app.main: FastAPI app, the /contributions route and wiring.
- app.adapters: GraphQL client for the upstream.
- app.caching: The single-slot contribution cache.
- app.domain: Value types and the request coordinator.
"""
