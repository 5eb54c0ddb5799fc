from typing import Type, TypeVar, Generic, List, Optional, Any, Dict, Union
from sqlalchemy.orm import Session, Query
from sqlalchemy.inspection import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import desc, asc, or_
from pydantic import BaseModel
from fastapi import HTTPException, status
import logging
import math
from sqlalchemy import String, Text
from datetime import datetime, timezone

ModelType = TypeVar("ModelType")
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)

def _to_dict(obj_in: Union[BaseModel, Dict[str, Any]], exclude_unset: bool = False) -> Dict[str, Any]:
    if isinstance(obj_in, BaseModel):
        return obj_in.model_dump(exclude_unset=exclude_unset)
    return dict(obj_in)

class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    # Columns (name, direction) used when the caller gives no sort_by
    default_order: List[tuple] = []

    def __init__(self, model: Type[ModelType]):
        self.model = model
        self.model_name = model.__name__
        self.pk_column = self._get_primary_key()
        self.searchable_fields = self._get_searchable_fields()
        self.sortable_fields = self._get_sortable_fields()

    def _apply_soft_delete_filter(self, query: Query, include_deleted: bool = False) -> Query:
        """Keep only rows with deleted_at IS NULL unless asked otherwise."""
        if include_deleted or not hasattr(self.model, 'deleted_at'):
            return query
        return query.filter(self.model.deleted_at.is_(None))

    def _get_primary_key(self):
        pk_columns = inspect(self.model).primary_key
        if not pk_columns:
            raise ValueError(f"Model {self.model_name} has no primary key")
        return pk_columns[0]

    def _get_searchable_fields(self):
        """Text columns suitable for ILIKE search"""
        return [
            prop.key for prop in inspect(self.model).column_attrs
            if isinstance(prop.columns[0].type, (String, Text)) and prop.key not in ['password_hash']
        ]

    def _get_sortable_fields(self):
        return [prop.key for prop in inspect(self.model).column_attrs]

    def _apply_default_order(self, query: Query) -> Query:
        if not self.default_order:
            return query.order_by(asc(self.pk_column))
        for field, direction in self.default_order:
            column = getattr(self.model, field)
            query = query.order_by(desc(column) if direction == "desc" else asc(column))
        return query

    def _conflict_or_error(self, db: Session, exc: SQLAlchemyError, action: str) -> HTTPException:
        db.rollback()
        if isinstance(exc, IntegrityError):
            logger.warning(f"Integrity error while {action} {self.model_name}: {exc.orig}")
            return HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{self.model_name} conflicts with existing data or references a missing record"
            )
        logger.error(f"Error {action} {self.model_name}: {exc}")
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error {action} {self.model_name.lower()}"
        )

    def get(self, db: Session, id: Any, include_deleted: bool = False) -> Optional[ModelType]:
        """Get a single record by primary key, skipping soft-deleted rows."""
        query = db.query(self.model).filter(self.pk_column == id)
        query = self._apply_soft_delete_filter(query, include_deleted)
        return query.first()

    def get_multi(
        self,
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        filters: Dict[str, Any] = None,
        search: str = None,
        sort_by: str = None,
        sort_order: str = "asc",
        include_deleted: bool = False
    ) -> Dict[str, Any]:
        """Paginated list with filtering, search and sorting"""
        try:
            query = db.query(self.model)
            query = self._apply_soft_delete_filter(query, include_deleted)

            if filters:
                query = self._apply_filters(query, filters)

            if search and self.searchable_fields:
                search_conditions = [
                    getattr(self.model, field).ilike(f"%{search}%")
                    for field in self.searchable_fields
                ]
                query = query.filter(or_(*search_conditions))

            total = query.count()

            if sort_by and sort_by in self.sortable_fields:
                column = getattr(self.model, sort_by)
                query = query.order_by(desc(column) if sort_order.lower() == "desc" else asc(column))
            else:
                query = self._apply_default_order(query)

            items = query.offset(skip).limit(limit).all()

            return {
                "items": items,
                "total": total,
                "page": (skip // limit) + 1 if limit > 0 else 1,
                "size": limit,
                "pages": math.ceil(total / limit) if limit > 0 else 1,
                "has_next": skip + limit < total,
                "has_prev": skip > 0
            }
        except SQLAlchemyError as e:
            logger.error(f"Error listing {self.model_name}: {e}")
            raise HTTPException(status_code=500, detail=f"Error retrieving {self.model_name.lower()} records")

    def _apply_filters(self, query: Query, filters: Dict[str, Any]) -> Query:
        """Exact match, IN (list) or operator dicts like {"gte": 10}, {"like": "x"}, {"in": [...]}"""
        for key, value in filters.items():
            if not hasattr(self.model, key) or value is None:
                continue

            column = getattr(self.model, key)

            if isinstance(value, dict):
                for op, op_value in value.items():
                    if op == "gte":
                        query = query.filter(column >= op_value)
                    elif op == "lte":
                        query = query.filter(column <= op_value)
                    elif op == "gt":
                        query = query.filter(column > op_value)
                    elif op == "lt":
                        query = query.filter(column < op_value)
                    elif op == "like":
                        query = query.filter(column.ilike(f"%{op_value}%"))
                    elif op == "in":
                        query = query.filter(column.in_(op_value))
                    elif op == "not_in":
                        query = query.filter(~column.in_(op_value))
                    elif op == "ne":
                        query = query.filter(column != op_value)
            elif isinstance(value, list):
                query = query.filter(column.in_(value))
            else:
                query = query.filter(column == value)

        return query

    def prepare_create(self, db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        """Hook for subclasses to derive or validate fields before insert."""
        return data

    def prepare_update(self, db: Session, db_obj: ModelType, data: Dict[str, Any]) -> Dict[str, Any]:
        """Hook for subclasses to derive or validate fields before update."""
        return data

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        obj_in_data = {k: v for k, v in _to_dict(obj_in).items() if v is not None}

        try:
            obj_in_data = self.prepare_create(db, obj_in_data)
            db_obj = self.model(**obj_in_data)
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
            return db_obj
        except HTTPException:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            raise self._conflict_or_error(db, e, "creating")

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """Partial update: only provided, non-null fields are written."""
        update_data = {
            k: v for k, v in _to_dict(obj_in, exclude_unset=True).items()
            if hasattr(db_obj, k) and v is not None
        }
        try:
            update_data = self.prepare_update(db, db_obj, update_data)
            for field, value in update_data.items():
                setattr(db_obj, field, value)
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
            return db_obj
        except HTTPException:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            raise self._conflict_or_error(db, e, "updating")

    def delete(self, db: Session, *, id: Any) -> ModelType:
        """Hard delete (also removes soft-deleted rows)"""
        obj = self.get(db, id, include_deleted=True)
        if not obj:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{self.model_name} not found"
            )

        try:
            db.delete(obj)
            db.commit()
            return obj
        except SQLAlchemyError as e:
            raise self._conflict_or_error(db, e, "deleting")

    def soft_delete(self, db: Session, *, id: Any) -> ModelType:
        """Set deleted_at on models that support it."""
        obj = self.get(db, id)
        if not obj:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{self.model_name} not found"
            )
        if not hasattr(obj, 'deleted_at'):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{self.model_name} does not support soft delete"
            )

        try:
            obj.deleted_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(obj)
            return obj
        except SQLAlchemyError as e:
            raise self._conflict_or_error(db, e, "deleting")

    def get_by_field(self, db: Session, field_name: str, value: Any) -> Optional[ModelType]:
        if not hasattr(self.model, field_name):
            return None
        query = db.query(self.model).filter(getattr(self.model, field_name) == value)
        return self._apply_soft_delete_filter(query).first()

    def exists(self, db: Session, id: Any) -> bool:
        query = db.query(self.model).filter(self.pk_column == id)
        query = self._apply_soft_delete_filter(query)
        return db.query(query.exists()).scalar()
