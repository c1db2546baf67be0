"""Recipe display domain: view models and formatting."""
