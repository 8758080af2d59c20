"""Customer registration, login and listing service."""
