"""
Services Layer

Business logic for scrim scheduling:
- Accept domain inputs (sessions, actors, templates, IDs)
- Return domain outputs (models, result objects with warnings and change signals)
- Do NOT depend on HTTP request/response objects
- Raise typed errors from teamops.services.errors; the route layer maps them to HTTP
"""
