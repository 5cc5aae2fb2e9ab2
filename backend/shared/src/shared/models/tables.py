"""SQLAlchemy Core table definitions.

Table and column names follow the existing LaybackGarmentsDB schema.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

from .enums import PaymentStatus, UserRole

metadata = MetaData()

orders = Table(
    "Orders",
    metadata,
    Column("OrderID", Integer, primary_key=True, autoincrement=True),
    Column(
        "PaymentStatus",
        String(32),
        nullable=False,
        default=PaymentStatus.UNPAID.value,
        server_default=PaymentStatus.UNPAID.value,
    ),
    Column("CreatedAt", DateTime(timezone=True), server_default=func.now()),
)

job_applications = Table(
    "JobApplications",
    metadata,
    Column("ApplicationID", Integer, primary_key=True, autoincrement=True),
    Column("FirstName", String(100), nullable=False),
    Column("LastName", String(100), nullable=False),
    Column("Email", String(255), nullable=False),
    Column("Phone", String(50), nullable=False),
    Column("Address", String(255), nullable=False),
    Column("City", String(100), nullable=False),
    Column("PostalCode", String(20), nullable=False),
    Column("Country", String(100), nullable=False),
    Column("JobRole", String(100), nullable=False),
    Column("HowFound", String(100), nullable=False),
    Column("CoverLetter", Text, nullable=True),
    Column("CVFileName", String(255), nullable=True),
    Column("CreatedAt", DateTime(timezone=True), server_default=func.now()),
)

users = Table(
    "Users",
    metadata,
    Column("UserID", Integer, primary_key=True, autoincrement=True),
    Column("Username", String(50), nullable=False, unique=True),
    Column("FirstName", String(100), nullable=False),
    Column("LastName", String(100), nullable=False),
    Column("Email", String(255), nullable=False, unique=True),
    Column("HashedPassword", String(255), nullable=False),
    Column(
        "Role",
        String(20),
        nullable=False,
        default=UserRole.CUSTOMER.value,
        server_default=UserRole.CUSTOMER.value,
    ),
    Column("CreatedAt", DateTime(timezone=True), server_default=func.now()),
)
