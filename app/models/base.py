"""Declarative base shared by every model module."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
