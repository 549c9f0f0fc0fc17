"""Framework adapters for the front controller.

This package provides adapters for serving the synchronous dispatch loop
from web frameworks:
- ASGI: Starlette and FastAPI applications
"""

from front_controller.adapters.asgi import FrontControllerApp

__all__ = ["FrontControllerApp"]
