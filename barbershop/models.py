from typing import List, Optional

from sqlalchemy import (
    DECIMAL,
    Date,
    DateTime,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
    Text,
    Time,
    text,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

Base = declarative_base()
metadata = Base.metadata


class Customer(Base):
    __tablename__ = "customers"

    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(255), nullable=False)
    phone = mapped_column(String(50))
    email = mapped_column(String(255))
    visits = mapped_column(Integer, server_default=text("0"))
    last_visit = mapped_column(Date)
    created_at = mapped_column(DateTime, server_default=text("CURRENT_TIMESTAMP"))

    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", uselist=True, back_populates="customer"
    )
    sales: Mapped[List["Sale"]] = relationship(
        "Sale", uselist=True, back_populates="customer"
    )


class Service(Base):
    __tablename__ = "services"

    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(255), nullable=False)
    duration = mapped_column(Integer, nullable=False)
    price = mapped_column(DECIMAL(10, 2), nullable=False)
    description = mapped_column(Text)
    created_at = mapped_column(DateTime, server_default=text("CURRENT_TIMESTAMP"))

    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", uselist=True, back_populates="service"
    )


class Product(Base):
    __tablename__ = "products"

    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(255), nullable=False)
    category = mapped_column(String(100), server_default=text("'Other'"))
    price = mapped_column(DECIMAL(10, 2), nullable=False, server_default=text("0"))
    stock = mapped_column(Integer, nullable=False, server_default=text("0"))
    description = mapped_column(Text)
    created_at = mapped_column(DateTime, server_default=text("CURRENT_TIMESTAMP"))


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["customer_id"],
            ["customers.id"],
            ondelete="CASCADE",
            name="fk_appointments_customer",
        ),
        ForeignKeyConstraint(
            ["service_id"],
            ["services.id"],
            ondelete="CASCADE",
            name="fk_appointments_service",
        ),
        Index("ix_appointments_date", "date"),
    )

    id = mapped_column(Integer, primary_key=True)
    customer_id = mapped_column(Integer)
    service_id = mapped_column(Integer)
    date = mapped_column(Date, nullable=False)
    time = mapped_column(Time, nullable=False)
    duration = mapped_column(Integer, nullable=False)
    status = mapped_column(String(50), server_default=text("'pending'"))
    notes = mapped_column(Text)
    payment_status = mapped_column(String(50), server_default=text("'unpaid'"))
    payment_method = mapped_column(String(50))
    created_at = mapped_column(DateTime, server_default=text("CURRENT_TIMESTAMP"))

    customer: Mapped[Optional["Customer"]] = relationship(
        "Customer", back_populates="appointments"
    )
    service: Mapped[Optional["Service"]] = relationship(
        "Service", back_populates="appointments"
    )


class Sale(Base):
    __tablename__ = "sales"
    __table_args__ = (
        ForeignKeyConstraint(
            ["appointment_id"],
            ["appointments.id"],
            ondelete="SET NULL",
            name="fk_sales_appointment",
        ),
        ForeignKeyConstraint(
            ["customer_id"],
            ["customers.id"],
            ondelete="SET NULL",
            name="fk_sales_customer",
        ),
        Index("ix_sales_date", "date"),
    )

    id = mapped_column(Integer, primary_key=True)
    appointment_id = mapped_column(Integer)
    customer_id = mapped_column(Integer)
    total = mapped_column(DECIMAL(10, 2), nullable=False)
    payment_method = mapped_column(String(50), nullable=False)
    date = mapped_column(Date, nullable=False)
    type = mapped_column(String(20), server_default=text("'product'"))
    created_at = mapped_column(DateTime, server_default=text("CURRENT_TIMESTAMP"))

    customer: Mapped[Optional["Customer"]] = relationship(
        "Customer", back_populates="sales"
    )
    sale_items: Mapped[List["SaleItem"]] = relationship(
        "SaleItem", uselist=True, back_populates="sale"
    )


class SaleItem(Base):
    __tablename__ = "sale_items"
    __table_args__ = (
        ForeignKeyConstraint(
            ["sale_id"], ["sales.id"], ondelete="CASCADE", name="fk_sale_items_sale"
        ),
    )

    id = mapped_column(Integer, primary_key=True)
    sale_id = mapped_column(Integer)
    item_id = mapped_column(Integer)
    item_type = mapped_column(String(50), nullable=False)
    name = mapped_column(String(255), nullable=False)
    price = mapped_column(DECIMAL(10, 2), nullable=False)
    quantity = mapped_column(Integer, nullable=False, server_default=text("1"))
    created_at = mapped_column(DateTime, server_default=text("CURRENT_TIMESTAMP"))

    sale: Mapped[Optional["Sale"]] = relationship("Sale", back_populates="sale_items")
