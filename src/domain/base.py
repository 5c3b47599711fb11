import uuid
from sqlalchemy import BigInteger, Integer
from sqlmodel import SQLModel


def generate_uuid() -> str:
    return str(uuid.uuid4())


# SQLite only autoincrements INTEGER PRIMARY KEY columns
BigIntegerPK = BigInteger().with_variant(Integer(), "sqlite")


class BaseModel(SQLModel):
    """Base class for all persisted entities"""
    pass
