"""
Hotel back office: application entry point
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hotelapp.config import settings
from hotelapp.database import init_db, SessionLocal
from hotelapp.routers import rooms, customers, reservations, services, payments, landing, jobs
from hotelapp.system.routers import config_router, support_messages

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: tables, seed data, lifecycle scheduler"""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_db()

    from hotelapp.system.services.config_seed import seed_config_data
    seed_db = SessionLocal()
    try:
        config_stats = seed_config_data(seed_db)
        if any(config_stats.values()):
            logger.info(f"Config seed data created: {config_stats}")
    except Exception as e:
        logger.warning(f"Config seed skipped: {e}")
    finally:
        seed_db.close()

    app.state.scheduler = None
    if settings.SCHEDULER_ENABLED:
        from hotelapp.jobs.scheduling import register_lifecycle_jobs
        from hotelapp.system.services.scheduler_backend import APSchedulerBackend
        backend = APSchedulerBackend()
        register_lifecycle_jobs(backend)
        backend.start()
        app.state.scheduler = backend

    yield

    if app.state.scheduler is not None:
        app.state.scheduler.shutdown()


app = FastAPI(
    title=settings.APP_NAME,
    description="Rooms, reservations, contracted services and the jobs that close them out",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms.category_router)
app.include_router(rooms.router)
app.include_router(customers.router)
app.include_router(reservations.router)
app.include_router(reservations.detail_router)
app.include_router(services.router)
app.include_router(services.contract_router)
app.include_router(payments.router)
app.include_router(landing.router)
app.include_router(jobs.router)
app.include_router(config_router.router)
app.include_router(support_messages.router)


@app.get("/")
def root():
    return {"name": settings.APP_NAME, "version": "1.0.0"}


@app.get("/health")
def health_check():
    """Health check"""
    return {"status": "healthy"}
