# Import all the models, so that Base has them before metadata.create_all is called

from db.base_class import Base  # noqa: F401
from db.tables.user import User  # noqa: F401
from db.tables.job import Job  # noqa: F401
from db.tables.application import Application  # noqa: F401
