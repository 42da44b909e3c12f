from sqlalchemy import Column, String, Integer, Numeric, Boolean, Date, DateTime, ForeignKey, UniqueConstraint, Uuid, func
from sqlalchemy.orm import DeclarativeBase
import uuid

class Base(DeclarativeBase):
    pass

class Company(Base):
    __tablename__ = "companies"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    cnpj = Column(String)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

class UploadHistory(Base):
    __tablename__ = "upload_history"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("companies.id"), nullable=False)
    sales_file = Column(String)
    products_file = Column(String)
    service_orders_file = Column(String)
    total_sales = Column(Integer, default=0)
    total_service_orders = Column(Integer, default=0)
    status = Column(String, default="processed")
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

class SalesLine(Base):
    __tablename__ = "sales_lines"
    __table_args__ = (
        UniqueConstraint("company_id", "sale_number", name="uq_sales_lines_company_sale"),
    )
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("companies.id"), nullable=False)
    upload_id = Column(Uuid, ForeignKey("upload_history.id"), nullable=False)
    sale_number = Column(Integer, nullable=False)
    sale_date = Column(Date)
    order_number = Column(Integer)
    seller = Column(String)
    client = Column(String)
    payment_method = Column(String)
    item_reference = Column(String, nullable=False)
    item_description = Column(String)
    quantity = Column(Integer, nullable=False, default=1)
    original_value = Column(Numeric(14, 2))
    adjustment_value = Column(Numeric(14, 2))
    unit_value = Column(Numeric(14, 2))
    gross_total = Column(Numeric(14, 2))
    discount_total = Column(Numeric(14, 2))
    net_total = Column(Numeric(14, 2))
    item_group = Column(String)
    item_brand = Column(String)
    item_supplier = Column(String)
    unit_cost = Column(Numeric(14, 4))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class ServiceOrderLine(Base):
    __tablename__ = "service_order_lines"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("companies.id"), nullable=False)
    upload_id = Column(Uuid, ForeignKey("upload_history.id"), nullable=False)
    order_number = Column(Integer, nullable=False)
    opened_on = Column(Date)
    status = Column(String)
    sale_status = Column(String)
    current_stage = Column(String)
    expected_delivery = Column(Date)
    delivered_on = Column(Date)
    seller = Column(String)
    item_reference = Column(String, nullable=False)
    item_description = Column(String)
    quantity = Column(Integer, nullable=False, default=1)
    original_value = Column(Numeric(14, 2))
    adjustment_value = Column(Numeric(14, 2))
    unit_value = Column(Numeric(14, 2))
    gross_total = Column(Numeric(14, 2))
    discount_total = Column(Numeric(14, 2))
    net_total = Column(Numeric(14, 2))
    item_group = Column(String)
    item_brand = Column(String)
    item_supplier = Column(String)
    unit_cost = Column(Numeric(14, 4))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
