from app.models import case  # noqa: F401
from app.models.case import Case  # noqa: F401
