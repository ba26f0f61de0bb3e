# inventory_manager/models.py
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
import enum

Base = declarative_base()

class ProductionProcess(enum.Enum):
    """Production processes recorded against the catalog.

    Values:
        SOAP_BOXING ('soapBoxing'): Wrapped soap is boxed into ready soap
        SHAMPOO_LABELING ('shampooLabeling'): Filled shampoo bottles are labeled
        LOTION_LABELING ('lotionLabeling'): Filled lotion bottles are labeled
        GIFT_SET_ASSEMBLY ('giftSetAssembly'): Ready products are packed into gift sets
    """
    SOAP_BOXING = 'soapBoxing'
    SHAMPOO_LABELING = 'shampooLabeling'
    LOTION_LABELING = 'lotionLabeling'
    GIFT_SET_ASSEMBLY = 'giftSetAssembly'

    def __str__(self):
        """Return the string value of the enum."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> 'ProductionProcess':
        """Create a ProductionProcess from its string value.

        Raises:
            ValueError if the string value is not valid
        """
        try:
            return cls(value)
        except ValueError:
            valid = ', '.join(p.value for p in cls)
            raise ValueError(f"Invalid production process: {value}. Valid values are: {valid}")

class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False, unique=True)
    quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())

    sales = relationship("Sale", back_populates="product")
    purchases = relationship("Purchase", back_populates="product")
    wastage = relationship("Wastage", back_populates="product")

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', quantity={self.quantity})>"

class Sale(Base):
    __tablename__ = 'sales'

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    sale_date = Column(Date, nullable=False)
    buyer_name = Column(String(200), nullable=False, default='')
    contact_no = Column(String(50))
    price_per_unit = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    trade_scheme = Column(String(20))
    discount_percentage = Column(Float)
    discount_amount = Column(Float)
    final_price = Column(Float, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    product = relationship("Product", back_populates="sales")

class Purchase(Base):
    __tablename__ = 'purchases'

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    purchase_date = Column(Date, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    product = relationship("Product", back_populates="purchases")

class Production(Base):
    __tablename__ = 'production'

    id = Column(Integer, primary_key=True)
    process = Column(String(50), nullable=False)
    quantity = Column(Integer, nullable=False)
    production_date = Column(Date, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

class Wastage(Base):
    __tablename__ = 'wastage'

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    reason = Column(String(500), nullable=False)
    wastage_date = Column(Date, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    product = relationship("Product", back_populates="wastage")

TABLE_MODELS = {
    'products': Product,
    'sales': Sale,
    'purchases': Purchase,
    'production': Production,
    'wastage': Wastage,
}
