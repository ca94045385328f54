import importlib
import logging
from pathlib import Path

from app.types.module import CoreModule, Module

error_logger = logging.getLogger("recommendations.error")


def discover_modules(pattern: str, variable_name: str) -> list:
    """
    Import every endpoints file matching `pattern` and return the module object it declares as `variable_name`
    """
    modules = []
    for endpoints_file in sorted(Path().glob(pattern)):
        endpoints = importlib.import_module(
            ".".join(endpoints_file.with_suffix("").parts),
        )
        if hasattr(endpoints, variable_name):
            modules.append(getattr(endpoints, variable_name))
        else:
            error_logger.error(
                f"{endpoints_file} does not declare a `{variable_name}` variable, its endpoints won't be enabled.",
            )
    return modules


module_list: list[Module] = discover_modules("app/modules/*/endpoints_*.py", "module")
core_module_list: list[CoreModule] = discover_modules(
    "app/core/*/endpoints_*.py",
    "core_module",
)

all_modules: list[CoreModule] = module_list + core_module_list
