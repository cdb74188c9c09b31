"""Declarative base shared by all Prophet models."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
