"""
Main Streamlit application for Schema Studio.
Builds request/response schemas through a field tree form kept in sync with
the JSON Schema document text.
"""

import streamlit as st
import logging

from schema_studio.config_loader import load_config, get_config_value
from schema_studio.schema_editor_view import SchemaEditor


def get_logging_level(level_str):
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


config = load_config()

# Configure logging dynamically from config
log_level_str = get_config_value(config, 'logging', 'level', 'INFO')
logging.basicConfig(
    level=get_logging_level(log_level_str),
    format=get_config_value(config, 'logging', 'format', '%(levelname)s - %(message)s')
)
logger = logging.getLogger(__name__)
logger.info(f"Logging configured to level: {log_level_str}")

st.set_page_config(
    page_title=get_config_value(config, 'ui', 'page_title', 'Schema Studio'),
    page_icon="📋",
    layout="wide"
)


def main():
    """Main application entry point."""
    logger.debug(f"Starting app version: {get_config_value(config, 'app', 'version', 'Unknown')}")
    SchemaEditor.render(config)


if __name__ == "__main__":
    main()
