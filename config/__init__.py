"""
Configuration for the missed-blocks checker: TOML app config, environment
settings and logging setup.
"""
