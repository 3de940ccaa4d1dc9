"""Storage collaborators for requests and user profiles."""
