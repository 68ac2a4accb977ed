from divulga_console.applications import approve_application
from divulga_console.client import ConsoleApiClient
from divulga_console.context import ConsoleContext
from divulga_console.gateway import PromoterGateway
from divulga_console.list_controller import PromoterListController
from divulga_console.optimistic import OptimisticCommand, run_optimistic

__all__ = [
    "ConsoleApiClient",
    "ConsoleContext",
    "OptimisticCommand",
    "PromoterGateway",
    "PromoterListController",
    "approve_application",
    "run_optimistic",
]
