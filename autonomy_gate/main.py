import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from autonomy_gate.api.v1.health import router as health_router
from autonomy_gate.api.v1.roles import router as roles_router
from autonomy_gate.api.v1.candidates import router as candidates_router
from autonomy_gate.core.cors import cors_allow_origin_regex, cors_allowed_origins
from autonomy_gate.core.rate_limit import limiter
from autonomy_gate.core.config import settings
from autonomy_gate.core.lifespan import lifespan

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Autonomy Gate API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_origin_regex=cors_allow_origin_regex(),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(roles_router, prefix="/v1", tags=["Roles"])
app.include_router(candidates_router, prefix="/v1", tags=["Candidates"])
