"""ORM Models: SQLAlchemy declarative models.

Design Decisions:
    - All models imported here so Base.metadata knows every table before create_all runs
"""

from scramble.models.kv_entry import KeyValueEntry  # noqa: F401
