from typing import List, Union
from sqlalchemy import exists
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from clientes.core.logging_config import get_logger
from clientes.domain.models import Cliente
from .results import Authenticated, Failure, FailureKind, Registered
from .schemas import ClienteCreate, ClienteRead

logger = get_logger(__name__)

# Drivers raise ValueError for values they cannot bind (psycopg2 and NUL
# characters); SQLAlchemy passes those through unwrapped
STORE_ERRORS = (SQLAlchemyError, ValueError)

class ClienteService:
    """
    Customer operations against the clientes table.

    Store errors never leave this class: the session is rolled back, the
    error is logged and a STORE_ERROR failure with a fixed message is
    returned instead.
    """

    def __init__(self, db: Session):
        self.db = db

    def register(self, data: ClienteCreate) -> Union[Registered, Failure]:
        # Email is checked first, so it wins when both are taken
        try:
            if self._exists(Cliente.email == data.email):
                return Failure(FailureKind.DUPLICATE_EMAIL, "email already registered")
        except STORE_ERRORS as e:
            return self._store_error("error checking email", e)

        try:
            if self._exists(Cliente.tax_id == data.tax_id):
                return Failure(FailureKind.DUPLICATE_TAX_ID, "taxId already registered")
        except STORE_ERRORS as e:
            return self._store_error("error checking taxId", e)

        obj = Cliente(
            name=data.name,
            tax_id=data.tax_id,
            address=data.address,
            email=data.email,
            password=data.password,
        )
        try:
            self.db.add(obj)
            self.db.commit()
        except STORE_ERRORS as e:
            return self._store_error("error registering customer", e)
        logger.info(f"Registered customer {obj.id}")
        return Registered()

    def login(self, email: str, password: str) -> Union[Authenticated, Failure]:
        try:
            row = (
                self.db.query(Cliente.id, Cliente.name)
                .filter(Cliente.email == email, Cliente.password == password)
                .first()
            )
            self.db.commit()
        except STORE_ERRORS as e:
            return self._store_error("error verifying credentials", e)
        if row is None:
            # Same answer for unknown email and wrong password
            return Failure(FailureKind.INVALID_CREDENTIALS, "invalid email or password")
        return Authenticated(id=row.id, name=row.name)

    def list(self) -> Union[List[ClienteRead], Failure]:
        try:
            rows = self.db.query(Cliente).order_by(Cliente.id).all()
            self.db.commit()
        except STORE_ERRORS as e:
            return self._store_error("error listing customers", e)
        return [ClienteRead.model_validate(row) for row in rows]

    def _exists(self, criterion) -> bool:
        return bool(self.db.query(exists().where(criterion)).scalar())

    def _store_error(self, message: str, error: Exception) -> Failure:
        logger.error(f"{message}: {error}")
        try:
            self.db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.error(f"rollback failed: {rollback_error}")
        return Failure(FailureKind.STORE_ERROR, message)
