from pydantic import create_model, Field
from sqlalchemy.inspection import inspect
from sqlalchemy import String, Text, JSON, Uuid
from sqlalchemy.types import Enum as SQLEnum
from typing import Optional, Union, List, Type
import logging
import uuid

logger = logging.getLogger(__name__)

AUDIT_FIELDS = ['created_at', 'updated_at', 'created_by', 'updated_by', 'deleted_at']

def _is_optional_type(type_hint) -> bool:
    return getattr(type_hint, '__origin__', None) is Union and type(None) in type_hint.__args__

def sqlalchemy_to_pydantic_type(column) -> Type:
    """Map a SQLAlchemy column to the Python type used in the generated schema."""
    if isinstance(column.type, Uuid):
        python_type = uuid.UUID
    elif isinstance(column.type, JSON):
        python_type = dict
    elif isinstance(column.type, SQLEnum) and column.type.enum_class is not None:
        python_type = column.type.enum_class
    else:
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            logger.warning(f"Column {column.name}: unable to resolve python type for {type(column.type).__name__}, using str")
            python_type = str

    return Optional[python_type] if column.nullable else python_type

def get_column_default(column):
    """Scalar column default, ``...`` when the column is required, else None."""
    if column.default is not None and getattr(column.default, 'is_scalar', False):
        return column.default.arg
    if column.default is not None or column.server_default is not None:
        return None
    if column.primary_key:
        return None
    if not column.nullable:
        return ...
    return None

def get_field_constraints(column) -> dict:
    if isinstance(column.type, SQLEnum):
        return {}
    if isinstance(column.type, (String, Text)) and getattr(column.type, 'length', None):
        return {'max_length': column.type.length}
    return {}

def create_pydantic_model_from_sqlalchemy(
    sqlalchemy_model,
    model_name: str,
    exclude_fields: List[str] = None,
    optional_fields: List[str] = None,
):
    """Build a Pydantic model with one field per mapped column."""
    exclude_fields = exclude_fields or []
    optional_fields = optional_fields or []

    fields = {}
    for column in inspect(sqlalchemy_model).columns:
        if column.name in exclude_fields:
            continue

        python_type = sqlalchemy_to_pydantic_type(column)
        default_value = get_column_default(column)

        # partial update: everything optional, nothing required
        if column.name in optional_fields:
            if not _is_optional_type(python_type):
                python_type = Optional[python_type]
            default_value = None

        field_kwargs = {
            'description': column.name.replace('_', ' ').title(),
            **get_field_constraints(column),
        }
        fields[column.name] = (python_type, Field(default_value, **field_kwargs))

    return create_model(model_name, __config__={'from_attributes': True}, **fields)

def generate_model_schemas(sqlalchemy_model, exclude_audit_fields: bool = True):
    """Create, Update and Response schemas for a model"""
    model_name = sqlalchemy_model.__name__

    base_exclude = ['id'] if exclude_audit_fields else []
    audit_exclude = AUDIT_FIELDS if exclude_audit_fields else []

    response_schema = create_pydantic_model_from_sqlalchemy(
        sqlalchemy_model,
        f"{model_name}Response",
        exclude_fields=['deleted_at', 'created_by', 'updated_by'],
        optional_fields=['created_at', 'updated_at'],
    )

    create_schema = create_pydantic_model_from_sqlalchemy(
        sqlalchemy_model,
        f"{model_name}Create",
        exclude_fields=base_exclude + audit_exclude
    )

    all_fields = [
        col.name for col in inspect(sqlalchemy_model).columns
        if col.name not in base_exclude + audit_exclude
    ]
    update_schema = create_pydantic_model_from_sqlalchemy(
        sqlalchemy_model,
        f"{model_name}Update",
        exclude_fields=base_exclude + audit_exclude,
        optional_fields=all_fields
    )

    return {
        'response': response_schema,
        'create': create_schema,
        'update': update_schema
    }
