from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.exception_handlers import RequestValidationError
from typing import Iterable, Optional, Tuple, Type
import re
from orm_slots.models.slottable import Slottable
from orm_slots.routers.slots import create_slot_router
from orm_slots.security import verify_api_key

VERSION = "1.0.0"

_ERROR_PREFIXES = re.compile(
    r"^(value is not a valid|Value error,|Value error|type error,|type error|none is not an allowed value|none is not allowed|not a valid)[:\s]*",
    flags=re.IGNORECASE,
)


# Global handler for Pydantic validation errors Formatting
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = err["loc"]
        # Remove "body" prefix if present
        if loc and loc[0] == "body":
            loc = loc[1:]
        field_name = ".".join(str(l) for l in loc)
        msg = _ERROR_PREFIXES.sub("", err["msg"])
        if msg.strip().lower() == "input should be a valid string":
            last_field = field_name.split('.')[-1] if field_name else "Field"
            msg = f"{last_field.capitalize()} cannot be empty"
        msg = msg.strip().rstrip('.')
        errors.append({
            "field": field_name,
            "message": msg
        })
    return JSONResponse(
        status_code=422,
        content={"detail": errors}
    )


def create_app(hosts: Optional[Iterable[Tuple[Type[Slottable], Optional[str]]]] = None) -> FastAPI:
    """
    Build the API. ``hosts`` is a list of (slottable model, url prefix) pairs,
    a None prefix falls back to the model's table name.
    """
    app = FastAPI(
        title="ORM Slots",
        description="Dynamic slot fields for database records",
        version=VERSION
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Protected endpoints (require Bearer token)
    @app.get("/", dependencies=[Depends(verify_api_key)])
    def read_root():
        return {
            "message": "ORM Slots API",
            "status": "running",
            "version": VERSION
        }

    for model, prefix in hosts or []:
        app.include_router(create_slot_router(model, prefix), dependencies=[Depends(verify_api_key)])

    return app
