from fastapi import HTTPException, Request

from adapters.base import DatabaseAdapter
from descriptor.models import SchemaDescriptor
from report.report_models import InitializationResult


def get_init(request: Request) -> InitializationResult:
    init = getattr(request.app.state, "db_init", None)
    if init is None:
        raise HTTPException(status_code=503, detail="Database not initialized")
    return init


def get_db(request: Request) -> DatabaseAdapter:
    return get_init(request).connection


def get_descriptor(request: Request) -> SchemaDescriptor:
    descriptor = getattr(request.app.state, "descriptor", None)
    if descriptor is None:
        raise HTTPException(status_code=503, detail="Database not initialized")
    return descriptor
