"""CircuitGuard: circuit analysis & safety assessment backend.

Responsibilities:
  1. Power flow: voltage / current / power per component
  2. Hazard detection against fixed engineering thresholds
  3. NEC / OSHA / NFPA compliance verdicts
  4. Safety score and risk tier

Stateless: the editor and assistant post a circuit and get results back.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from circuitguard.config import get_settings
from circuitguard.core.logging import setup_logging
from circuitguard.routers import analysis

VERSION = "0.1.0"


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)

    application = FastAPI(
        title=settings.app_name,
        version=VERSION,
        debug=settings.debug,
        description=(
            "Circuit analysis and safety assessment.\n\n"
            "Computes operating values for every component and derives "
            "hazards, standards compliance and a safety score."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ─── Analysis (stateless) ───
    application.include_router(
        analysis.router, prefix="/api/analysis", tags=["Analysis"]
    )

    @application.get("/health")
    def health_check():
        return {"status": "ok", "service": "circuitguard", "version": VERSION}

    return application


app = create_app()
