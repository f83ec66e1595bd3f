# =============================================================================
# WordChef Client - Client Package
# =============================================================================
# This package contains the client-side components: the HTTP API client for
# the nearest/image/bulk_image endpoints, the API key credential store, image
# decoding, and the interactive query session behind the CLI.
# =============================================================================
