import importlib
import inspect
import pkgutil

from fastapi import APIRouter, FastAPI
from loguru import logger


def discover_routers(package_name: str = "app.api") -> list[APIRouter]:
    """
    Find every APIRouter defined in the modules of a package.

    Args:
        package_name: The package to scan for routers.

    Returns:
        The routers, in module name order.
    """
    package = importlib.import_module(package_name)
    package_path = getattr(package, "__path__", None)

    if not package_path:
        logger.warning(f"Cannot scan {package_name} for routers as it's not a package")
        return []

    routers: list[APIRouter] = []
    for _, module_name, _ in sorted(pkgutil.iter_modules(package_path), key=lambda m: m.name):
        full_module_name = f"{package_name}.{module_name}"
        module = importlib.import_module(full_module_name)

        for _, obj in inspect.getmembers(module, lambda member: isinstance(member, APIRouter)):
            routers.append(obj)
            logger.info(f"Discovered router in {full_module_name}")

    return routers


def register_routers(app: FastAPI, prefix: str = "/api") -> None:
    """
    Register all routers in the app.api package with the FastAPI app.

    Args:
        app: The FastAPI app.
        prefix: The prefix to add to all routes.
    """
    for router in discover_routers():
        app.include_router(router, prefix=prefix)
