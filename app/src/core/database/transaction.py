from contextvars import ContextVar
from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession
from src.core.logging import get_logger

logger = get_logger(__name__)

_transaction_depth: ContextVar[int] = ContextVar("transaction_depth", default=0)


def in_transaction() -> bool:
    """True while the current task runs inside a :class:`Transaction` block."""
    return _transaction_depth.get() > 0


class Transaction:
    """
    Unit of work over an ``AsyncSession``.

    Repositories only flush while a transaction is open; the outermost block
    commits on success and rolls back everything written inside it on error.
    Nested blocks join the outer one.

    Usage:
        async with Transaction(session):
            await order_repository.create(...)
            await product_repository.decrement_stock(...)
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._token = None
        self._outermost = False

    async def __aenter__(self) -> "Transaction":
        self._outermost = not in_transaction()
        self._token = _transaction_depth.set(_transaction_depth.get() + 1)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if not self._outermost:
                return

            if exc_type is None:
                await self.session.commit()
            else:
                logger.warning(
                    f"Rolling back transaction after {exc_type.__name__}",
                    extra={"event_type": "transaction_rollback"},
                )
                await self.session.rollback()
        finally:
            if self._token is not None:
                _transaction_depth.reset(self._token)
