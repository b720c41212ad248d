"""Configuration module: exports Settings, load_config, and the template registry."""

from src.config.form_templates import get_rule_set, get_template, list_templates
from src.config.loader import load_config
from src.config.settings import Settings

__all__ = ["Settings", "get_rule_set", "get_template", "list_templates", "load_config"]
