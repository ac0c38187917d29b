# flowershop/product_service/main.py
from fastapi import FastAPI, Query

app = FastAPI(title="Catalog Service (dev mock)")


PRODUCTS = {
    1: {"id": 1, "name": "Ramo de 12 rosas rojas", "summary": "Rosas rojas premium", "price": 45.00, "stock": 20, "active": True},
    2: {"id": 2, "name": "Bouquet de girasoles", "summary": "Girasoles frescos", "price": 32.50, "stock": 15, "active": True},
    3: {"id": 3, "name": "Orquídea blanca", "summary": "Phalaenopsis en maceta", "price": 58.00, "stock": 5, "active": True},
    7: {"id": 7, "name": "Arreglo de tulipanes", "summary": "Tulipanes mixtos", "price": 25.99, "stock": 10, "active": True},
    9: {"id": 9, "name": "Corona fúnebre", "summary": "Temporada pasada", "price": 120.00, "stock": 0, "active": False},
}


@app.get("/products")
def get_products(ids: str = Query(..., description="comma separated product ids")):
    wanted = [int(i) for i in ids.split(",") if i.strip().isdigit()]
    # unknown ids are simply absent from the response
    return [PRODUCTS[i] for i in wanted if i in PRODUCTS]
