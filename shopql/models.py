import enum

from sqlalchemy import JSON, CheckConstraint, Column, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .db import Base


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Uniqueness is enforced here only; signup relies on this constraint
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    # Unknown role strings are rejected both by the ORM and by a CHECK constraint
    role = Column(
        Enum(Role, name="role", validate_strings=True, create_constraint=True),
        nullable=False,
        default=Role.USER,
    )

    orders = relationship("Order", back_populates="user")


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_products_price_non_negative"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Product ids as given by the client; not checked against the products table
    products = Column(JSON, nullable=False, default=list)
    total_price = Column(Numeric(10, 2), nullable=False)

    user = relationship("User", back_populates="orders")
