# product_service/main.py
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

app = FastAPI(title="Product Service (dev mock)")


PRODUCTS = {
    1: {"id": 1, "name": "Margherita Pizza", "price": 12.50, "stock": 40, "description": "Tomato, mozzarella, basil", "image": "/img/margherita.jpg"},
    2: {"id": 2, "name": "Caesar Salad", "price": 8.00, "stock": 15, "description": "Romaine, parmesan, croutons", "image": "/img/caesar.jpg"},
    3: {"id": 3, "name": "Lemonade", "price": 3.25, "stock": 120, "description": "Freshly squeezed", "image": "/img/lemonade.jpg"},
}


class PriceIn(BaseModel):
    price: float = Field(..., gt=0)


@app.get("/products/{product_id}")
def get_product(product_id: int):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@app.put("/products/{product_id}/price")
def set_price(product_id: int, payload: PriceIn):
    # zmiana ceny w katalogu - koszyki trzymaja swoj snapshot
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    product["price"] = payload.price
    return product
