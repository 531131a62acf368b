import logging
import threading

from fastapi import APIRouter, Depends, HTTPException, Request

from adapters.base import DatabaseAdapter
from app.database import get_db, get_descriptor
from app.services.diagnostic import run_diagnostic
from compare.structure_validator import validate
from descriptor.models import SchemaDescriptor
from repair.ddl_script import load_ddl_script
from repair.repair_engine import repair

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schema", tags=["Schema"])

# one repair at a time per process
_repair_lock = threading.Lock()


def get_ddl_script(request: Request) -> str:
    path = request.app.state.config.ddl_path
    try:
        return load_ddl_script(path)
    except OSError as e:
        logger.error("❌ Could not read DDL script %s: %s", path, e)
        raise HTTPException(status_code=500, detail=f"DDL script unavailable: {e}")


@router.get("/validation")
def get_validation(
    db: DatabaseAdapter = Depends(get_db),
    descriptor: SchemaDescriptor = Depends(get_descriptor),
):
    return validate(db, descriptor).model_dump(mode="json")


@router.post("/repair")
def post_repair(
    db: DatabaseAdapter = Depends(get_db),
    descriptor: SchemaDescriptor = Depends(get_descriptor),
    ddl_script: str = Depends(get_ddl_script),
):
    with _repair_lock:
        outcome = repair(db, descriptor, ddl_script)
        report = validate(db, descriptor)
    return {
        "repair": outcome.model_dump(mode="json"),
        "validation": report.model_dump(mode="json"),
    }


@router.post("/diagnostic")
def post_diagnostic(
    request: Request,
    repair: bool = True,
    db: DatabaseAdapter = Depends(get_db),
    descriptor: SchemaDescriptor = Depends(get_descriptor),
):
    if not repair:
        return run_diagnostic(db, descriptor, "", repair=False).model_dump(mode="json")
    ddl_script = get_ddl_script(request)
    with _repair_lock:
        result = run_diagnostic(db, descriptor, ddl_script, repair=True)
    return result.model_dump(mode="json")
