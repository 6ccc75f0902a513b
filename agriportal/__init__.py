"""
AgriPortal: async client library for the agricultural services portal.

Paginated, searchable, realtime-refreshed CRUD over the portal's Supabase
tables, plus identity and role resolution.  Wire it up with
``agriportal.services.create_services``.
"""

__version__ = "0.1.0"
