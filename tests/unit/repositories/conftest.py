# tests/unit/repositories/conftest.py
"""Repository 测试专用 fixtures.

使用内存 SQLite 建立与统计库同名的表,验证 SQL 与行映射。
"""

import pytest
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
)
from sqlalchemy.pool import StaticPool

registration_metadata = MetaData()

registration_account = Table(
    "Registration_Account",
    registration_metadata,
    Column("Id", String(36), primary_key=True),
    Column("Name", String(256)),
    Column("OrganizationNumber", BigInteger),
    Column("IsArchived", Boolean),
    Column("IsActive", Boolean),
    Column("RegistrationStatusId", Integer),
    Column("Primary_User_Id", String(36)),
)

registration_account_status = Table(
    "Registration_Account_Status",
    registration_metadata,
    Column("Id", Integer, primary_key=True),
    Column("Status", String(64)),
)

registration_user = Table(
    "Registration_User",
    registration_metadata,
    Column("Id", String(36), primary_key=True),
    Column("Email", String(256)),
    Column("First_Name", String(128)),
    Column("Last_Name", String(128)),
    Column("IsArchived", Boolean),
)

user_login_history = Table(
    "User_Login_History",
    registration_metadata,
    Column("RegistrationUserId", String(36)),
    Column("Date", DateTime),
)

registration_account_user_role = Table(
    "Registration_Account_User_Role",
    registration_metadata,
    Column("AccountId", String(36)),
    Column("UserId", String(36)),
    Column("RoleId", String(64)),
    Column("Is_Default_Account", Boolean),
    Column("RegisteredAs", Boolean),
)

capassa_account_user_role = Table(
    "Capassa_Account_User_Role",
    registration_metadata,
    Column("AccountId", String(36)),
    Column("UserId", String(36)),
    Column("Email", String(256)),
    Column("RoleId", String(64)),
    Column("Is_Default_Account", Boolean),
    Column("RegisteredAs", Boolean),
)

account_subscription_history = Table(
    "Account_Subscription_History",
    registration_metadata,
    Column("AccountId", String(36)),
    Column("SbscriptionId", String(36)),
    Column("IsActive", Boolean),
    Column("StartDate", DateTime),
    Column("EndDate", DateTime),
)

capassa_subscription_text = Table(
    "Capassa_Subscription_Text",
    registration_metadata,
    Column("SbscriptionId", String(36)),
    Column("LanguageId", String(8)),
    Column("Name", String(256)),
)

finance_metadata = MetaData()

accounting_system_credential = Table(
    "AccountingSystemCredential",
    finance_metadata,
    Column("Id", Integer, primary_key=True, autoincrement=True),
    Column("AccountId", String(36)),
    Column("SyncStatus", Integer),
    Column("SyncEndDatetime", DateTime),
)


def _memory_engine():
    return create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def registration_engine():
    engine = _memory_engine()
    registration_metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def finance_engine():
    engine = _memory_engine()
    finance_metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def registration_tables():
    return registration_metadata.tables


@pytest.fixture
def finance_tables():
    return finance_metadata.tables
