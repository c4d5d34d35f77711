"""
Pytest configuration and fixtures for testing
"""
import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from database import Base, get_db
from services.notification_service import get_notifier
from services.payment_gateway import GatewayPayment, PaymentGatewayError, get_payment_gateway


class FakeGateway:
    """Stands in for YooKassaGateway and records what it was asked to create"""

    def __init__(self, fail_with=None):
        self.calls = []
        self.fail_with = fail_with

    async def create_payment(self, amount, description, return_url, metadata=None, currency="RUB"):
        self.calls.append({
            "amount": amount,
            "description": description,
            "return_url": return_url,
            "metadata": metadata,
        })
        if self.fail_with:
            raise PaymentGatewayError(self.fail_with)
        return GatewayPayment(
            id=f"2d{len(self.calls):06d}-000f-5000-9000-1b68e7b15f3f",
            status="pending",
            confirmation_url=f"https://yoomoney.ru/checkout/payments/v2/contract?orderId={len(self.calls)}",
        )


class FakeNotifier:
    """Records sent messages; optionally fails the first `failures` sends"""

    def __init__(self, failures=0):
        self.sent = []
        self.attempts = 0
        self.failures = failures

    async def send_message(self, chat_id, text):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise RuntimeError("telegram unavailable")
        self.sent.append((chat_id, text))


class FailingSession:
    """AsyncSession stand-in for an unreachable database"""

    async def execute(self, *args, **kwargs):
        raise RuntimeError("database is unavailable")

    async def commit(self):
        pass

    async def rollback(self):
        pass

    async def close(self):
        pass


@pytest.fixture
async def test_engine(tmp_path):
    """
    Fixture that provides an isolated SQLite database file for each test.
    Every session checks out its own connection, so concurrent requests
    see real SQLite locking. Tables are created before the test and
    dropped afterwards.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{(tmp_path / 'test.db').as_posix()}",
        echo=False,
        future=True,
    )
    async with engine.begin() as conn:
        # Import models to ensure they're registered with Base
        import database_models  # noqa: F401
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture
async def test_db(session_factory):
    """Yields a clean AsyncSession for the test"""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@pytest.fixture
def app_overrides(session_factory):
    """
    FastAPI app with the database dependency pointed at the test engine.
    Gateway defaults to test mode and notifications go nowhere.
    """
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: None
    app.dependency_overrides[get_notifier] = lambda: None

    yield app

    # Cleanup: remove dependency overrides
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_overrides):
    """
    Async HTTP client fixture with test database override.
    Uses httpx.AsyncClient over ASGITransport for asynchronous testing.
    """
    transport = httpx.ASGITransport(app=app_overrides)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
