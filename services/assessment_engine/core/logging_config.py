import logging
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

from .config import engine_settings

HANDLER_NAME = "assessment_engine"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        if not log_record.get('timestamp'):
            log_record['timestamp'] = record.created
        if log_record.get('level'):
            log_record['level'] = log_record['level'].upper()
        else:
            log_record['level'] = record.levelname
        log_record['module'] = record.module
        log_record['lineno'] = record.lineno


def setup_logging(log_level_str: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """
    Configures logging for a host embedding the engine.

    Defaults come from EngineSettings (ASSESSMENT_LOG_LEVEL, ASSESSMENT_JSON_LOGS).
    Calling it again only adjusts the level.
    """
    log_level_str = log_level_str or engine_settings.log_level
    json_logs = engine_settings.json_logs if json_logs is None else json_logs
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if any(h.get_name() == HANDLER_NAME for h in root_logger.handlers):
        root_logger.info(f"Logging already configured. Current level: {logging.getLevelName(log_level)}")
        return

    log_handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(module)s %(lineno)d %(message)s')
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_handler.setFormatter(formatter)
    log_handler.set_name(HANDLER_NAME)
    root_logger.addHandler(log_handler)
    root_logger.info(f"Logging configured with level: {logging.getLevelName(log_level)}")
