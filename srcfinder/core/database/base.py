# File: srcfinder/core/database/base.py

from sqlalchemy.orm import declarative_base

# The shared registry for the cache tables (meta row + directory rows).
Base = declarative_base()
