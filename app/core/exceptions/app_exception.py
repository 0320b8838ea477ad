import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from typing import Optional, Any


class AppHttpException(HTTPException):
    def __init__(
        self,
        status_code: int,
        detail: str,
        solution: Optional[str] = None,
        errors: Optional[Any] = None,
    ):
        content = {
            "success": False,
            "error": detail,
        }
        if solution:
            content["solution"] = solution
        if errors:
            content["details"] = errors

        super().__init__(status_code=status_code, detail=detail)
        self.status_code = status_code
        self.detail = detail
        self.solution = solution
        self.errors = errors
        self.content = content


async def app_http_exception_handler(request: Request, exc: AppHttpException):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.content))


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    logging.info(f"SYSTEM >>> Invalid request data on {request.url.path}")
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"success": False, "error": "Invalid request data", "details": exc.errors()}),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(AppHttpException, app_http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
