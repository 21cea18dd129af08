from sqlalchemy import create_engine               # engine factory
from sqlalchemy.orm import declarative_base, sessionmaker

from config.settings import settings

# ✅ SQLite needs check_same_thread off because FastAPI runs sync routes in a threadpool
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)

# ✅ session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ base class for declarative models
Base = declarative_base()


# ==========================================================
# [shared] per-request DB session
# ==========================================================
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ==========================================================
# [shared] schema bootstrap
# ==========================================================
def init_db(bind=None):
    """Create every gradebook table on the given engine (defaults to the app engine)"""
    # ✅ import all models so relationship() strings resolve and metadata is complete
    from models import assignments, classrooms, gradebook_settings, quizzes, students, teachers  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
