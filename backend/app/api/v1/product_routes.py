from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.deps import get_db
from app.schemas.common import Envelope, MessageOut, RecordStatus
from app.schemas.product import ProductCategory, ProductCreate, ProductOut, ProductUpdate
from app.services.product_service import (
    create_product,
    delete_product,
    get_product,
    get_product_by_barcode,
    list_products,
    update_product,
)

router = APIRouter()


@router.get(
    "",
    response_model=Envelope[List[ProductOut]],
    summary="List products, newest first",
)
def list_products_api(
    search: Optional[str] = Query(default=None, description="Matches name, SKU or barcode"),
    category: Optional[str] = None,
    product_category: Optional[ProductCategory] = None,
    record_status: Optional[RecordStatus] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
):
    products = list_products(
        db,
        search=search,
        category=category,
        product_category=product_category,
        status=record_status,
    )
    return {"data": products, "count": len(products)}


@router.get(
    "/barcode/{barcode}",
    response_model=Envelope[ProductOut],
    summary="Look up a product by barcode",
)
def get_product_by_barcode_api(barcode: str, db: Session = Depends(get_db)):
    return {"data": get_product_by_barcode(db, barcode)}


@router.get(
    "/{product_id}",
    response_model=Envelope[ProductOut],
    summary="Get a product",
)
def get_product_api(product_id: int, db: Session = Depends(get_db)):
    return {"data": get_product(db, product_id)}


@router.post(
    "",
    response_model=Envelope[ProductOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
def create_product_api(payload: ProductCreate, db: Session = Depends(get_db)):
    product = create_product(db, payload)
    return {"data": product, "message": "Product created successfully"}


@router.put(
    "/{product_id}",
    response_model=Envelope[ProductOut],
    summary="Update a product",
)
@router.patch(
    "/{product_id}",
    response_model=Envelope[ProductOut],
    summary="Partially update a product",
)
def update_product_api(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    product = update_product(db, product_id, payload)
    return {"data": product, "message": "Product updated successfully"}


@router.delete(
    "/{product_id}",
    response_model=MessageOut,
    summary="Delete a product",
)
def delete_product_api(
    product_id: int,
    cascade: bool = Query(default=False, description="Delete even when bills or invoices reference it"),
    db: Session = Depends(get_db),
):
    return {"message": delete_product(db, product_id, cascade=cascade)}
