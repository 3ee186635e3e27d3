"""Follow Up Boss tool bridge."""
