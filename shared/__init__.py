# =============================================================================
# WordChef Client - Shared Schemas Package
# =============================================================================
# Pydantic models describing the JSON bodies exchanged with the WordChef web
# service.
# =============================================================================
