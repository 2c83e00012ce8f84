# storefront/models/order.py
# Модели Order и OrderItem для фиксации сумм и статусов заказа.
# Цена в OrderItem — снимок на момент оформления, каталог на неё не влияет.
from sqlalchemy import Column, Integer, Text, ForeignKey, Numeric, DateTime, Enum, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from storefront.db.base import Base
import enum

class OrderStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"

class CheckoutStage(str, enum.Enum):
    order_created = "order_created"
    items_written = "items_written"
    completed = "completed"

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    shipping_address = Column(Text, nullable=False)
    status = Column(Enum(OrderStatus), default=OrderStatus.pending, nullable=False)
    checkout_stage = Column(Enum(CheckoutStage), default=CheckoutStage.order_created, nullable=False)
    # [{"product_id": 1, "quantity": 2, "price": "10.00"}, ...]
    checkout_snapshot = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User")
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")

class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        UniqueConstraint("order_id", "product_id", name="uq_order_items_order_product"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # NULL после удаления товара из каталога
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    @property
    def product_name(self):
        return self.product.name if self.product is not None else None
