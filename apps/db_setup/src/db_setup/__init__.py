from db_setup.config import DbSetupConfig, load_config
from db_setup.pathing import find_config_file, find_project_root

__all__ = [
    "DbSetupConfig",
    "find_config_file",
    "find_project_root",
    "load_config",
]
