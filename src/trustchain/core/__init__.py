"""Core trust chain components: artifacts, signing, claims, and trust."""
