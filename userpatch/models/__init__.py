# userpatch/models/__init__.py

"""
Centralizes model imports so Base.metadata knows about every table
as soon as the models package is imported.
"""

from userpatch.database import Base

from .user import User
