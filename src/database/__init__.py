from src.database.connection import get_session, get_engine, init_db, session_scope
from src.database.models import (
    Base, RawCustomer, ChurnFeature, ChurnPrediction, TrainingRun,
)
from src.database.repository import (
    RawCustomerRepository, FeatureRepository,
    PredictionRepository, TrainingRunRepository,
)
