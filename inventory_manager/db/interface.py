# inventory_manager/db/interface.py
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime
from typing import Dict, Any, Optional, List, Type

from sqlalchemy import Date
from sqlalchemy.exc import SQLAlchemyError

from inventory_manager.core.production import production_adjustments, resolve_process
from inventory_manager.exceptions import DatabaseError
from inventory_manager.models import Base, Product, Production, Sale, Wastage, TABLE_MODELS
from inventory_manager.utils.date_utils import convert_to_date

logger = logging.getLogger(__name__)

class DatabaseInterface(ABC):
    """Persistence operations the services depend on.

    Rows are exchanged as plain dictionaries; date columns travel as
    'YYYY-MM-DD' strings regardless of backend.
    """

    @abstractmethod
    def query(
        self,
        table_name: str,
        filters: Dict[str, Any] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        date_column: Optional[str] = None,
        date_from: Any = None
    ) -> List[Dict[str, Any]]:
        """Query rows from a table.

        Args:
            table_name: Table to read
            filters: Column equality filters; list values match any element
            order_by: Optional column to sort by
            descending: Sort direction
            limit: Optional maximum number of rows
            date_column: Column compared against date_from
            date_from: Inclusive lower bound for date_column
        """
        pass

    @abstractmethod
    def insert(self, table_name: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row and return it as stored."""
        pass

    @abstractmethod
    def update(self, table_name: str, data: Dict[str, Any], filters: Dict[str, Any]) -> int:
        """Update rows and return the number affected."""
        pass

    @abstractmethod
    def delete(self, table_name: str, filters: Dict[str, Any]) -> int:
        """Delete rows and return the number affected."""
        pass

    @abstractmethod
    def rpc(self, function_name: str, params: Dict[str, Any] = None) -> Any:
        """Call a named database procedure."""
        pass

class SupabaseInterface(DatabaseInterface):
    """Supabase interface implementation."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    def _execute(self, request, action: str):
        try:
            result = request.execute()
        except Exception as e:
            raise DatabaseError(f"Supabase {action} error: {str(e)}")

        error = getattr(result, 'error', None)
        if error:
            raise DatabaseError(f"Supabase {action} error: {error}")

        return result

    def _apply_filters(self, request, filters: Optional[Dict[str, Any]]):
        for key, value in (filters or {}).items():
            if isinstance(value, list):
                request = request.in_(key, value)
            else:
                request = request.eq(key, value)
        return request

    def query(self, table_name, filters=None, order_by=None, descending=False,
              limit=None, date_column=None, date_from=None):
        """Query data from a table using Supabase."""
        request = self._apply_filters(self.client.table(table_name).select('*'), filters)

        if date_column and date_from is not None:
            request = request.gte(date_column, str(date_from))

        if order_by:
            request = request.order(order_by, desc=descending)

        if limit:
            request = request.limit(limit)

        result = self._execute(request, 'query')
        return result.data if result.data else []

    def insert(self, table_name, data):
        """Insert data into a table using Supabase."""
        result = self._execute(self.client.table(table_name).insert(data), 'insert')
        return result.data[0] if result.data else {}

    def update(self, table_name, data, filters):
        """Update data in a table using Supabase."""
        request = self._apply_filters(self.client.table(table_name).update(data), filters)
        result = self._execute(request, 'update')
        return len(result.data) if result.data else 0

    def delete(self, table_name, filters):
        """Delete data from a table using Supabase."""
        request = self._apply_filters(self.client.table(table_name).delete(), filters)
        result = self._execute(request, 'delete')
        return len(result.data) if result.data else 0

    def rpc(self, function_name, params=None):
        """Call a database function through Supabase RPC."""
        result = self._execute(self.client.rpc(function_name, params or {}), 'RPC')
        return result.data

class SQLAlchemyInterface(DatabaseInterface):
    """SQLAlchemy implementation for PostgreSQL and SQLite databases.

    The named procedures that live in the hosted database are implemented
    here in Python, each inside a single transaction.
    """

    def __init__(self, session_factory):
        """Initialize with a SQLAlchemy session factory."""
        self._session_factory = session_factory
        self._procedures = {
            'update_product_quantity': self._update_product_quantity,
            'record_production': self._record_production,
            'reverse_sale': self._reverse_sale,
            'reverse_production': self._reverse_production,
            'reverse_wastage': self._reverse_wastage,
        }

    @contextmanager
    def _session(self):
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise DatabaseError(f"Database error: {str(e)}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _model(self, table_name: str) -> Type[Base]:
        model = TABLE_MODELS.get(table_name)
        if model is None:
            raise DatabaseError(f"Unknown table: {table_name}")
        return model

    def _column(self, model: Type[Base], name: str):
        if name not in model.__table__.columns:
            raise DatabaseError(f"Unknown column {name} on {model.__tablename__}")
        return getattr(model, name)

    def _coerce(self, model: Type[Base], data: Dict[str, Any]) -> Dict[str, Any]:
        """Convert incoming values to column types."""
        coerced = {}
        for key, value in data.items():
            column = model.__table__.columns.get(key)
            if column is None:
                raise DatabaseError(f"Unknown column {key} on {model.__tablename__}")
            if isinstance(column.type, Date) and value is not None and not isinstance(value, date):
                value = convert_to_date(value)
            coerced[key] = value
        return coerced

    def _filtered(self, session, model, filters):
        query = session.query(model)
        for key, value in (filters or {}).items():
            column = self._column(model, key)
            if isinstance(value, list):
                query = query.filter(column.in_(value))
            else:
                query = query.filter(column == value)
        return query

    @staticmethod
    def _row_to_dict(instance: Base) -> Dict[str, Any]:
        result = {}
        for column in instance.__table__.columns:
            value = getattr(instance, column.name)
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            result[column.name] = value
        return result

    def query(self, table_name, filters=None, order_by=None, descending=False,
              limit=None, date_column=None, date_from=None):
        """Query data from a table using SQLAlchemy."""
        model = self._model(table_name)
        with self._session() as session:
            query = self._filtered(session, model, filters)

            if date_column and date_from is not None:
                query = query.filter(self._column(model, date_column) >= convert_to_date(date_from))

            if order_by:
                column = self._column(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc(), model.id)

            if limit:
                query = query.limit(limit)

            return [self._row_to_dict(row) for row in query.all()]

    def insert(self, table_name, data):
        """Insert data into a table using SQLAlchemy."""
        model = self._model(table_name)
        with self._session() as session:
            instance = model(**self._coerce(model, data))
            session.add(instance)
            session.flush()
            session.refresh(instance)
            return self._row_to_dict(instance)

    def update(self, table_name, data, filters):
        """Update data in a table using SQLAlchemy."""
        model = self._model(table_name)
        with self._session() as session:
            return self._filtered(session, model, filters).update(
                self._coerce(model, data), synchronize_session=False
            )

    def delete(self, table_name, filters):
        """Delete data from a table using SQLAlchemy."""
        model = self._model(table_name)
        with self._session() as session:
            return self._filtered(session, model, filters).delete(synchronize_session=False)

    def rpc(self, function_name, params=None):
        """Run a named procedure."""
        procedure = self._procedures.get(function_name)
        if procedure is None:
            raise DatabaseError(f"Unknown database function: {function_name}")

        with self._session() as session:
            return procedure(session, **(params or {}))

    def _update_product_quantity(self, session, p_id: int, qty: int) -> bool:
        product = session.get(Product, p_id)
        if product is None:
            logger.warning(f"update_product_quantity: product {p_id} not found")
            return False

        product.quantity = (product.quantity or 0) + qty
        return True

    def _apply_adjustments(self, session, adjustments) -> None:
        for product_name, delta in adjustments:
            session.query(Product).filter(Product.name == product_name).update(
                {Product.quantity: Product.quantity + delta}, synchronize_session=False
            )

    def _record_production(self, session, p_process: str, p_quantity: int, p_production_date) -> None:
        adjustments = production_adjustments(p_process, p_quantity)

        session.add(Production(
            process=resolve_process(p_process).value,
            quantity=p_quantity,
            production_date=convert_to_date(p_production_date)
        ))
        self._apply_adjustments(session, adjustments)
        return None

    def _reverse_sale(self, session, p_sale_id: int) -> bool:
        sale = session.get(Sale, p_sale_id)
        if sale is None:
            logger.warning(f"reverse_sale: sale {p_sale_id} not found")
            return False

        self._update_product_quantity(session, sale.product_id, sale.quantity)
        session.delete(sale)
        return True

    def _reverse_wastage(self, session, p_wastage_id: int) -> bool:
        wastage = session.get(Wastage, p_wastage_id)
        if wastage is None:
            logger.warning(f"reverse_wastage: wastage {p_wastage_id} not found")
            return False

        self._update_product_quantity(session, wastage.product_id, wastage.quantity)
        session.delete(wastage)
        return True

    def _reverse_production(self, session, p_production_id: int) -> bool:
        run = session.get(Production, p_production_id)
        if run is None:
            logger.warning(f"reverse_production: run {p_production_id} not found")
            return False

        self._apply_adjustments(
            session, [(name, -delta) for name, delta in production_adjustments(run.process, run.quantity)]
        )
        session.delete(run)
        return True
