from __future__ import annotations

import logging
import sys
import types
from collections.abc import Callable, Mapping
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Final, NoReturn, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ExceptionHandler

from sponsor_api.api.router import router as api_router
from sponsor_api.core.clock import Clock, system_clock
from sponsor_api.core.config import InvalidSettingsError, MissingRequiredSettingsError
from sponsor_api.core.errors import (
    http_exception_handler,
    rate_limit_exception_handler,
    request_validation_exception_handler,
    service_exception_handler,
    unhandled_exception_handler,
)
from sponsor_api.core.lifespan import lifespan
from sponsor_api.core.logging import configure_logging
from sponsor_api.core.rate_limit import limiter
from sponsor_api.services.errors import ServiceError
from sponsor_api.services.issue_service import issue_service_factory_provider
from sponsor_api.services.newsletter_service import newsletter_service_factory_provider
from sponsor_api.services.sponsorship_service import sponsorship_service_factory_provider
from sponsor_api.services.user_service import user_service_factory_provider

PACKAGE_NAME: Final[str] = "newsletter-sponsor-api"
FALLBACK_VERSION: Final[str] = "0.1.0"


def _exit_with_settings_error(heading: str, lines: list[str], action: str) -> NoReturn:
    print(f"ERROR: {heading}:", file=sys.stderr)
    for line in lines:
        print(f"  - {line}", file=sys.stderr)
    print(f"\nPlease {action} in your .env file (see env.example for reference)", file=sys.stderr)
    sys.exit(1)


# Importing settings validates the environment.
try:
    from sponsor_api.core.config import settings
except MissingRequiredSettingsError as e:
    _exit_with_settings_error(
        "Missing required environment variables", e.missing_fields, "set these"
    )
except InvalidSettingsError as e:
    _exit_with_settings_error(
        "Invalid environment variable values",
        [f"{field}: {message}" for field, message in e.invalid_fields],
        "update these",
    )

# Most specific first; Exception is the catch-all that logs and returns a 500.
EXCEPTION_HANDLERS: Final[tuple[tuple[type[Exception], Callable[..., Any]], ...]] = (
    (ServiceError, service_exception_handler),
    (StarletteHTTPException, http_exception_handler),
    (RequestValidationError, request_validation_exception_handler),
    (RateLimitExceeded, rate_limit_exception_handler),
    (Exception, unhandled_exception_handler),
)


def build_services(clock: Clock = system_clock) -> Mapping[str, Any]:
    """Registry of session-scoped service factories, resolved per request by UnitOfWork."""
    return types.MappingProxyType(
        {
            "user_service": user_service_factory_provider(),
            "newsletter_service": newsletter_service_factory_provider(
                clock, settings.schedule_max_issues
            ),
            "issue_service": issue_service_factory_provider(clock),
            "sponsorship_service": sponsorship_service_factory_provider(clock),
        }
    )


def _api_version() -> str:
    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        logging.warning(
            "%s package not found, using fallback version %s", PACKAGE_NAME, FALLBACK_VERSION
        )
        return FALLBACK_VERSION


def create_app(clock: Clock = system_clock) -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=_api_version(),
        debug=settings.environment == "local",
        lifespan=lifespan,
    )
    for exc_class, handler in EXCEPTION_HANDLERS:
        app.add_exception_handler(exc_class, cast(ExceptionHandler, handler))
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.include_router(api_router, prefix="/api")
    app.state.services = build_services(clock)

    return app


app = create_app()
