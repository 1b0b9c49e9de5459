# Core components: config, logging
from .config import api_settings, engine_settings
from .logging_config import setup_logging
