from decimal import Decimal
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories import SqlAlchemyFeeTransactionRepository
from src.adapter.services.engine import build_connect_args, apply_sqlite_locking
from src.adapter.services.event_bus import InMemoryEventBus
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.use_cases.fees import RecordPlatformFee
from src.domain.events import SaleConfirmed


engine = create_async_engine(
    ApplicationConfig.DB_URI,
    echo=ApplicationConfig.DB_ECHO,
    future=True,
    connect_args=build_connect_args(ApplicationConfig.DB_URI, ApplicationConfig.LOCK_TIMEOUT_MS),
)
apply_sqlite_locking(engine)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


def build_event_bus(session_factory, fee_percent=ApplicationConfig.PLATFORM_FEE_PERCENT) -> InMemoryEventBus:
    """Event bus with every in-process subscriber registered"""
    bus = InMemoryEventBus()

    async def record_platform_fee(event: SaleConfirmed):
        async with session_factory() as session:
            use_case = RecordPlatformFee(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyFeeTransactionRepository(session),
                fee_percent=Decimal(str(fee_percent)),
            )
            return await use_case.execute(event)

    bus.subscribe(SaleConfirmed, record_platform_fee)
    return bus


event_bus = build_event_bus(AsyncSessionLocal)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_event_publisher() -> EventPublisher:
    return event_bus


def get_config():
    return ApplicationConfig
