import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from audiology.core import config
from audiology.database import Base, engine
from audiology.models import appointment, audiologist, branch, client, practice, procedure, user  # noqa: F401
from audiology.routes import (
    appointment_routes,
    audiologist_routes,
    auth_routes,
    catalog_routes,
    dashboard_routes,
    practice_routes,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
)

config.validate_runtime_config()

app = FastAPI(title='Audiology Practice API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Audiology Practice API Running'}


app.include_router(auth_routes.router, prefix='/api/auth')
app.include_router(practice_routes.router, prefix='/api')
app.include_router(audiologist_routes.router, prefix='/api')
app.include_router(catalog_routes.router, prefix='/api')
app.include_router(appointment_routes.router, prefix='/api')
app.include_router(dashboard_routes.router, prefix='/api')
