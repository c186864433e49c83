"""In-memory stand-in for the shop backend, served to the client through httpx's ASGITransport."""
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
import secrets
from typing import Dict, List, Optional, Tuple
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

url_prefix = "/api"

# payment-backed deployments also cancel PENDING and PAYMENT_FAILED orders
CANCELLABLE_STATUSES = ("CREATED", "PENDING", "PAYMENT_FAILED")

SEED_PRODUCTS = [
    {"id": 7, "name": "Notebook", "price": Decimal("2.50"), "description": "A5 dotted", "category": "stationery", "stock": 40},
    {"id": 8, "name": "Gel Pen", "price": Decimal("1.20"), "description": "0.5mm black", "category": "stationery", "stock": 100},
    {"id": 9, "name": "Desk Lamp", "price": Decimal("19.99"), "description": "LED, dimmable", "category": "home", "stock": 0},
]


@dataclass
class BackendState:
    users: Dict[int, dict] = field(default_factory=dict)
    tokens: Dict[str, int] = field(default_factory=dict)
    products: Dict[int, dict] = field(default_factory=dict)
    carts: Dict[int, List[dict]] = field(default_factory=dict)
    orders: Dict[int, dict] = field(default_factory=dict)
    requests: List[Tuple[str, str, Optional[str]]] = field(default_factory=list)
    next_user_id: int = 1
    next_order_id: int = 100

    def expire_tokens(self):
        self.tokens.clear()

    def confirm_order(self, order_id: int):
        self.set_order_status(order_id, "CONFIRMED")

    def set_order_status(self, order_id: int, status: str):
        self.orders[order_id]["status"] = status

    def paths(self) -> List[str]:
        return [p for _, p, _ in self.requests]


class RegisterBody(BaseModel):
    email: str
    password: str
    firstName: str
    lastName: str


class LoginBody(BaseModel):
    email: str
    password: str


class AddItemBody(BaseModel):
    productId: int
    productName: str
    price: Decimal
    quantity: int


class QuantityBody(BaseModel):
    quantity: int


class ProfileBody(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None


def _user_out(user: dict) -> dict:
    return {"id": user["id"], "email": user["email"], "firstName": user["firstName"],
            "lastName": user["lastName"], "role": "CUSTOMER", "active": True}


def _product_out(p: dict) -> dict:
    return {"id": p["id"], "name": p["name"], "price": float(p["price"]), "description": p["description"],
            "category": p["category"], "active": True}


def _item_out(item: dict) -> dict:
    return {"productId": item["productId"], "productName": item["productName"], "price": float(item["price"]),
            "quantity": item["quantity"], "subtotal": float(item["price"] * item["quantity"])}


def _cart_out(user_id: int, items: List[dict]) -> dict:
    return {"userId": user_id, "items": [_item_out(i) for i in items]}


def _order_out(order: dict) -> dict:
    return {"id": order["id"], "userId": order["userId"], "status": order["status"],
            "totalAmount": float(order["totalAmount"]), "items": [_item_out(i) for i in order["items"]],
            "createdAt": order["createdAt"]}


def create_fake_backend() -> FastAPI:

    state = BackendState()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        for p in SEED_PRODUCTS:
            state.products[p["id"]] = dict(p)
        yield

    app = FastAPI(title="fake-shop", lifespan=lifespan)
    app.state.backend = state

    @app.middleware("http")
    async def record_requests(request: Request, call_next):
        state.requests.append((request.method, request.url.path, request.headers.get("authorization")))
        return await call_next(request)

    def current_user_id(request: Request) -> int:
        auth = request.headers.get("authorization", "")
        token = auth[len("Bearer "):] if auth.startswith("Bearer ") else None
        if not token or token not in state.tokens:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
        return state.tokens[token]

    def issue_token(user: dict) -> dict:
        token = secrets.token_urlsafe(16)
        state.tokens[token] = user["id"]
        return {"token": token, **_user_out(user)}

    @app.post(f"{url_prefix}/auth/register", status_code=201)
    async def register(body: RegisterBody):
        if any(u["email"] == body.email for u in state.users.values()):
            raise HTTPException(status_code=400, detail="User with email already exists")
        user = {"id": state.next_user_id, **body.model_dump()}
        state.next_user_id += 1
        state.users[user["id"]] = user
        return issue_token(user)

    @app.post(f"{url_prefix}/auth/login")
    async def login(body: LoginBody):
        for user in state.users.values():
            if user["email"] == body.email and user["password"] == body.password:
                return issue_token(user)
        return JSONResponse({"message": "Invalid credentials"}, status_code=401)

    @app.get(f"{url_prefix}/users/me")
    async def get_profile(user_id: int = Depends(current_user_id)):
        return _user_out(state.users[user_id])

    @app.put(f"{url_prefix}/users/me")
    async def update_profile(body: ProfileBody, user_id: int = Depends(current_user_id)):
        user = state.users[user_id]
        user.update(body.model_dump(exclude_none=True))
        return _user_out(user)

    @app.get(f"{url_prefix}/products")
    async def list_products(user_id: int = Depends(current_user_id)):
        # paged the way spring data answers
        return {"content": [_product_out(p) for p in state.products.values()], "totalElements": len(state.products)}

    @app.get(f"{url_prefix}/products/search")
    async def search_products(keyword: str, user_id: int = Depends(current_user_id)):
        kw = keyword.lower()
        return [_product_out(p) for p in state.products.values() if kw in p["name"].lower()]

    @app.get(f"{url_prefix}/products/category/{{category}}")
    async def products_by_category(category: str, user_id: int = Depends(current_user_id)):
        return [_product_out(p) for p in state.products.values() if p["category"] == category]

    @app.get(f"{url_prefix}/products/{{product_id}}")
    async def get_product(product_id: int, user_id: int = Depends(current_user_id)):
        if product_id not in state.products:
            raise HTTPException(status_code=404, detail="Product not found")
        return _product_out(state.products[product_id])

    @app.get(f"{url_prefix}/inventory/{{product_id}}")
    async def check_stock(product_id: int, user_id: int = Depends(current_user_id)):
        if product_id not in state.products:
            raise HTTPException(status_code=404, detail="Inventory not found")
        stock = state.products[product_id]["stock"]
        return {"id": product_id, "productId": product_id, "availableQuantity": stock, "reservedQuantity": 0,
                "totalQuantity": stock, "inStock": stock > 0}

    @app.get(f"{url_prefix}/cart")
    async def get_cart(user_id: int = Depends(current_user_id)):
        return _cart_out(user_id, state.carts.get(user_id, []))

    @app.post(f"{url_prefix}/cart/items")
    async def add_to_cart(body: AddItemBody, user_id: int = Depends(current_user_id)):
        if body.quantity < 1:
            return JSONResponse({"message": "Quantity must be at least 1"}, status_code=400)
        items = state.carts.setdefault(user_id, [])
        for item in items:
            if item["productId"] == body.productId:
                item["quantity"] += body.quantity
                break
        else:
            items.append({"productId": body.productId, "productName": body.productName,
                          "price": body.price, "quantity": body.quantity})
        return _cart_out(user_id, items)

    @app.put(f"{url_prefix}/cart/items/{{product_id}}")
    async def update_quantity(product_id: int, body: QuantityBody, user_id: int = Depends(current_user_id)):
        items = state.carts.get(user_id, [])
        for item in items:
            if item["productId"] == product_id:
                item["quantity"] = body.quantity
                return _cart_out(user_id, items)
        raise HTTPException(status_code=404, detail="Product not found in cart")

    @app.delete(f"{url_prefix}/cart/items/{{product_id}}")
    async def remove_from_cart(product_id: int, user_id: int = Depends(current_user_id)):
        items = state.carts.get(user_id, [])
        remaining = [i for i in items if i["productId"] != product_id]
        if len(remaining) == len(items):
            raise HTTPException(status_code=404, detail="Product not found in cart")
        state.carts[user_id] = remaining
        return _cart_out(user_id, remaining)

    @app.delete(f"{url_prefix}/cart")
    async def clear_cart(user_id: int = Depends(current_user_id)):
        state.carts.pop(user_id, None)
        return Response(status_code=204)

    @app.post(f"{url_prefix}/orders", status_code=201)
    async def create_order(user_id: int = Depends(current_user_id)):
        items = state.carts.get(user_id, [])
        if not items:
            raise HTTPException(status_code=400, detail="Cart is empty")
        order = {
            "id": state.next_order_id,
            "userId": user_id,
            "status": "CREATED",
            "items": [dict(i) for i in items],
            "totalAmount": sum((i["price"] * i["quantity"] for i in items), Decimal("0")),
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        state.next_order_id += 1
        state.orders[order["id"]] = order
        state.carts.pop(user_id, None)
        return _order_out(order)

    @app.get(f"{url_prefix}/orders")
    async def list_orders(user_id: int = Depends(current_user_id)):
        return [_order_out(o) for o in state.orders.values() if o["userId"] == user_id]

    def owned_order(order_id: int, user_id: int) -> dict:
        order = state.orders.get(order_id)
        if order is None or order["userId"] != user_id:
            raise HTTPException(status_code=404, detail="Order not found")
        return order

    @app.get(f"{url_prefix}/orders/{{order_id}}")
    async def get_order(order_id: int, user_id: int = Depends(current_user_id)):
        return _order_out(owned_order(order_id, user_id))

    @app.post(f"{url_prefix}/orders/{{order_id}}/cancel")
    async def cancel_order(order_id: int, user_id: int = Depends(current_user_id)):
        order = owned_order(order_id, user_id)
        if order["status"] not in CANCELLABLE_STATUSES:
            return JSONResponse({"message": f"Order cannot be cancelled in status {order['status']}"},
                                status_code=400)
        order["status"] = "CANCELLED"
        return _order_out(order)

    return app
