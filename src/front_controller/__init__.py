"""
Front controller for presenter-based Python web applications.

This package routes an HTTP request to a presenter, follows internal
forwards, sends the final response, reroutes unhandled failures to an error
presenter, and stores requests in the session so flows can resume after a
redirect.
"""

from front_controller.config import ApplicationConfig
from front_controller.core.application import Application
from front_controller.core.request_store import RequestStore
from front_controller.events import LifecycleEvent, LifecycleEvents
from front_controller.exceptions import (
    ApplicationError,
    BadRequestError,
    InvalidLinkError,
    InvalidPresenterError,
    LoopOverflowError,
)
from front_controller.models import Continue, Dispatched, Redirect, Request, RequestFlag, RequestMethod

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Application",
    "ApplicationConfig",
    "ApplicationError",
    "BadRequestError",
    "Continue",
    "Dispatched",
    "InvalidLinkError",
    "InvalidPresenterError",
    "LifecycleEvent",
    "LifecycleEvents",
    "LoopOverflowError",
    "Redirect",
    "Request",
    "RequestFlag",
    "RequestMethod",
    "RequestStore",
]
