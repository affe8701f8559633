# Import all models so SQLAlchemy can resolve relationships
from app.models.database import Base  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.history import RecommendationHistory  # noqa: F401
