"""YAML-backed application configuration (``config/app_config.yml``)."""
