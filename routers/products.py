# routers/products.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from core.logging_config import logger
from core.policy import Action, ResourceKind
from core.utils import clean_text, utcnow
from database import get_session
from dependencies.auth import require
from models.auth import Principal
from models.product import Product, ProductCreate, ProductRead, ProductUpdate


router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


def _to_read(product: Product) -> dict:
    return ProductRead.model_validate(product).model_dump()


# -----------------------------------------------------
# Public catalogue
# -----------------------------------------------------
@router.get("", summary="List products (public)")
def list_products(
    principal=Depends(require(ResourceKind.product, Action.list)),
    session: Session = Depends(get_session),
):
    rows = session.exec(select(Product).order_by(Product.created_at.desc())).all()
    return [_to_read(p) for p in rows]


# -----------------------------------------------------
# Admin management
# -----------------------------------------------------
@router.post("", summary="Admin: create a product")
def create_product(
    payload: ProductCreate,
    principal: Principal = Depends(require(ResourceKind.product, Action.create)),
    session: Session = Depends(get_session),
):
    name = clean_text(payload.name)
    if not name:
        raise HTTPException(400, "Product name is required")
    if payload.price is None or payload.price < 0:
        raise HTTPException(400, "Valid price is required")

    product = Product(
        name=name,
        description=clean_text(payload.description),
        category=clean_text(payload.category),
        price=payload.price,
        is_active=payload.is_active,
    )
    session.add(product)
    session.commit()
    session.refresh(product)

    logger.info(f"Product {product.id} ({product.name}) created by {principal.id}")
    return {"success": True, "product": _to_read(product)}


@router.patch("/{product_id}", summary="Admin: update a product")
def update_product(
    product_id: str,
    payload: ProductUpdate,
    principal: Principal = Depends(require(ResourceKind.product, Action.update)),
    session: Session = Depends(get_session),
):
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "price" in updates and updates["price"] < 0:
        raise HTTPException(400, "Valid price is required")
    if "name" in updates and not clean_text(updates["name"]):
        raise HTTPException(400, "Product name is required")

    for key, value in updates.items():
        setattr(product, key, value.strip() if isinstance(value, str) else value)
    product.updated_at = utcnow()

    session.add(product)
    session.commit()
    session.refresh(product)
    return {"success": True, "product": _to_read(product)}


@router.delete("/{product_id}", summary="Admin: delete a product")
def delete_product(
    product_id: str,
    principal: Principal = Depends(require(ResourceKind.product, Action.delete)),
    session: Session = Depends(get_session),
):
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    session.delete(product)
    session.commit()

    logger.info(f"Product {product_id} deleted by {principal.id}")
    return {"success": True, "message": "Product deleted"}
