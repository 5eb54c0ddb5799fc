from fastapi import APIRouter, Depends, HTTPException, Query, Path, Body, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional, Type, get_type_hints
from pydantic import BaseModel, create_model, Field
from uuid import UUID
import inflect
from app.schemas.generator import generate_model_schemas
from app.routers.generic_crud import CRUDBase

inflector = inflect.engine()

def _update_type_hints(func, hints: Dict[str, Type]):
    """Apply type hints to a generated endpoint so FastAPI sees the real schema."""
    existing_hints = get_type_hints(func)
    existing_hints.update(hints)
    func.__annotations__ = existing_hints


class PaginatedBase(BaseModel):
    """Common pagination fields for generated list responses."""
    model_config = {'from_attributes': True}

    total: int = 0
    page: int = 1
    size: int = 100
    pages: int = 1
    has_next: bool = False
    has_prev: bool = False


class RouteGenerator:
    def __init__(
        self,
        model,
        crud_class: CRUDBase,
        db_dependency,
        auth_dependency = None,
        write_dependency = None,
        schemas: Dict[str, Type[BaseModel]] = None,
        prefix: str = None,
        tag_prefix: str = None,
        soft_delete: bool = True
    ):
        self.model = model
        # default of the DELETE route's ``soft`` query parameter
        self.soft_delete = soft_delete
        self.crud = crud_class
        self.get_db = db_dependency
        # reads use auth_dependency; writes use write_dependency when given
        self.auth_dependency = auth_dependency
        self.write_dependency = write_dependency or auth_dependency

        self.model_name = model.__name__.lower()
        self.model_plural = inflector.plural(self.model_name)
        self.tag_name = tag_prefix or self.model_plural.title()
        self.prefix = prefix if prefix is not None else f"/{self.model_plural}"

        schemas = schemas or {}
        if not all(key in schemas for key in ("response", "create", "update")):
            schemas = {**generate_model_schemas(model), **schemas}
        self.schemas = schemas

    def generate_router(
        self,
        include_routes: List[str] = None,
        exclude_routes: List[str] = None
    ) -> APIRouter:
        """Generate router with configurable routes"""

        include_routes = include_routes or ['list', 'get', 'create', 'update', 'delete']
        exclude_routes = exclude_routes or []
        active_routes = [route for route in include_routes if route not in exclude_routes]

        router = APIRouter(prefix=self.prefix, tags=[self.tag_name])

        ResponseSchema = self.schemas['response']
        CreateSchema = self.schemas['create']
        UpdateSchema = self.schemas['update']

        ListResponseSchema = create_model(
            f"{self.model.__name__}ListResponse",
            __base__=PaginatedBase,
            items=(List[ResponseSchema], Field(..., description=f"List of {self.model_plural}")),
        )

        read_dep = [Depends(self.auth_dependency)] if self.auth_dependency else []
        write_dep = [Depends(self.write_dependency)] if self.write_dependency else []
        db_dep = Depends(self.get_db)

        if 'list' in active_routes:
            @router.get(
                "/",
                response_model=ListResponseSchema,
                summary=f"List {self.model_plural}",
                description=f"Retrieve a paginated list of {self.model_plural} with filtering and search",
                dependencies=read_dep
            )
            async def list_items(
                skip: int = Query(0, ge=0, description="Number of records to skip"),
                limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
                sort_by: Optional[str] = Query(None, description="Field to sort by"),
                sort_order: str = Query("asc", pattern="^(asc|desc)$", description="Sort order"),
                search: Optional[str] = Query(None, description="Search term"),
                include_deleted: bool = Query(False, description="Set true to include soft-deleted records"),
                db: Session = db_dep
            ):
                return self.crud.get_multi(
                    db,
                    skip=skip,
                    limit=limit,
                    search=search,
                    sort_by=sort_by,
                    sort_order=sort_order,
                    include_deleted=include_deleted
                )

        if 'get' in active_routes:
            @router.get(
                "/{item_id}",
                response_model=ResponseSchema,
                summary=f"Get {self.model_name}",
                description=f"Retrieve a single {self.model_name} by ID",
                dependencies=read_dep
            )
            async def get_item(
                item_id: UUID = Path(..., description=f"{self.model_name.title()} ID"),
                db: Session = db_dep
            ):
                db_item = self.crud.get(db, id=item_id)
                if db_item is None:
                    raise HTTPException(
                        status_code=status.HTTP_404_NOT_FOUND,
                        detail=f"{self.model.__name__} not found"
                    )
                return db_item

        if 'create' in active_routes:
            async def create_item(
                item: Any = Body(..., description=f"The {self.model_name} data to create"),
                db: Session = db_dep
            ):
                return self.crud.create(db=db, obj_in=item)

            # annotate before registering so FastAPI validates the body against the schema
            _update_type_hints(create_item, {"item": CreateSchema})
            router.post(
                "/",
                response_model=ResponseSchema,
                status_code=status.HTTP_201_CREATED,
                summary=f"Create {self.model_name}",
                description=f"Create a new {self.model_name}",
                dependencies=write_dep
            )(create_item)

        if 'update' in active_routes:
            async def update_item(
                item_id: UUID = Path(..., description=f"{self.model_name.title()} ID"),
                item: Any = Body(..., description=f"The {self.model_name} data to update"),
                db: Session = db_dep
            ):
                db_item = self.crud.get(db, id=item_id)
                if db_item is None:
                    raise HTTPException(
                        status_code=status.HTTP_404_NOT_FOUND,
                        detail=f"{self.model.__name__} not found"
                    )
                return self.crud.update(db=db, db_obj=db_item, obj_in=item)

            _update_type_hints(update_item, {"item": UpdateSchema})
            router.put(
                "/{item_id}",
                response_model=ResponseSchema,
                summary=f"Update {self.model_name}",
                description=f"Update an existing {self.model_name}",
                dependencies=write_dep
            )(update_item)

        if 'delete' in active_routes:
            @router.delete(
                "/{item_id}",
                summary=f"Delete {self.model_name}",
                description=f"Delete a {self.model_name}",
                dependencies=write_dep
            )
            async def delete_item(
                item_id: UUID = Path(..., description=f"{self.model_name.title()} ID"),
                soft: bool = Query(self.soft_delete, description="Perform soft delete if supported"),
                db: Session = db_dep
            ):
                if soft:
                    self.crud.soft_delete(db=db, id=item_id)
                else:
                    self.crud.delete(db=db, id=item_id)

                return JSONResponse(
                    content={
                        "message": f"{self.model.__name__} deleted successfully",
                        "id": str(item_id)
                    },
                    status_code=status.HTTP_200_OK
                )

        return router

def create_crud_router(
    model,
    db_dependency,
    auth_dependency = None,
    write_dependency = None,
    crud: CRUDBase = None,
    schemas: Dict[str, Type[BaseModel]] = None,
    include_routes: List[str] = None,
    exclude_routes: List[str] = None,
    prefix: str = None,
    tag_prefix: str = None,
    soft_delete: bool = True
) -> APIRouter:
    """
    Build a CRUD router for a model; pass ``crud`` to plug in a custom repository.

    Models whose unique keys must be reusable after deletion should pass
    ``soft_delete=False`` so DELETE removes the row.
    """
    generator = RouteGenerator(
        model=model,
        crud_class=crud or CRUDBase(model),
        db_dependency=db_dependency,
        auth_dependency=auth_dependency,
        write_dependency=write_dependency,
        schemas=schemas,
        prefix=prefix,
        tag_prefix=tag_prefix,
        soft_delete=soft_delete
    )

    return generator.generate_router(
        include_routes=include_routes,
        exclude_routes=exclude_routes
    )
