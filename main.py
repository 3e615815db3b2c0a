from dotenv import load_dotenv
import logging
import os

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.dependencies import enforce_route_gates
from core.traffic import TrafficRecorder
from routes import auth
from routes import feedback
from routes import admin_feedback
from routes import admin_users
from routes import admin_system

logger = logging.getLogger(__name__)

app = FastAPI(title="Campus Feedback API")


allowed_origins = os.getenv("ALLOWED_ORIGINS", "*")
if allowed_origins != "*":
    allowed_origins = [origin.strip() for origin in allowed_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if allowed_origins != "*" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TrafficRecorder)


# Every error leaves as {"error": "..."}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # authentication, approval and role outrank a bad body
    try:
        await run_in_threadpool(enforce_route_gates, request)
    except StarletteHTTPException as gate_error:
        return await http_exception_handler(request, gate_error)

    errors = exc.errors()
    if errors:
        first = errors[0]
        if first.get("type") == "json_invalid":
            message = "Invalid JSON body"
        else:
            field = ".".join(
                str(part) for part in first.get("loc", ()) if part != "body" and not isinstance(part, int)
            )
            message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Storage error"})


@app.get("/api/health")
def health():
    return {"status": "OK", "system": "Campus Feedback API"}


# Routes
app.include_router(auth.router)
app.include_router(feedback.router)
app.include_router(admin_feedback.router)
app.include_router(admin_users.router)
app.include_router(admin_system.router)


# Must stay last: unknown API paths answer in JSON
@app.api_route("/api/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def api_not_found(path: str):
    raise HTTPException(status_code=404, detail="API Endpoint Not Found")
