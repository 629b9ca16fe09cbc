import logging
def get_logger(name:str="pyv_cache"):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    return logging.getLogger(name)

def set_level(level:str):
    """Applies a level name such as 'DEBUG' to the pyv_cache loggers."""
    if not isinstance(level, str):
        raise ValueError(f"Unknown log level: {level!r}")
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.getLogger("pyv_cache").setLevel(numeric)
