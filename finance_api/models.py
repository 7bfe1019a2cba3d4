# finance_api/models.py
from sqlalchemy import Column, Integer, String, Numeric

from .db import Base

# sqlite_autoincrement: ids are never handed out twice, even after deletes


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # pbkdf2 hash, never the plain text
    password = Column(String(255), nullable=False)


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)

    # plain integers: no foreign keys, any referenced id is accepted
    user_id = Column(Integer, nullable=False, index=True)
    category_id = Column(Integer, nullable=False, index=True)

    # signed, "expense" rows are not forced negative
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)

    # free text label, e.g. "income" / "expense"
    type = Column(String(50), nullable=False)
