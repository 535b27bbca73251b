from .logger import setup_logger, get_logger
from .dockerfile import generate_dockerfile
from .naming import snake_case, pluralize, table_name, route_segment

__all__ = [
    "setup_logger",
    "get_logger",
    "generate_dockerfile",
    "snake_case",
    "pluralize",
    "table_name",
    "route_segment",
]
