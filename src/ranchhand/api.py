"""FastAPI REST API for ranchhand."""

from decimal import Decimal
from typing import Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from . import __version__, config
from .auth import Actor
from .errors import (
    ConcurrentUpdateError,
    NotFoundError,
    PermissionDeniedError,
    QuoteAlreadyConvertedError,
    RanchError,
    TransientIOError,
    ValidationError,
)
from .models import CatalogItem, MapPin, Order, Poster, Quote, RanchLog, Recipe, Todo
from .pricing import compute_totals, describe_items, parse_line_items
from .ranch import Ranch


# --- Pydantic Schemas ---


class LineItemSchema(BaseModel):
    catalog_ref: str = ""
    name: str
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = 1


class ChecklistEntrySchema(BaseModel):
    checked: bool = False
    checked_by: Optional[str] = None
    checked_by_name: Optional[str] = None
    checked_at: Optional[str] = None


class OrderSchema(BaseModel):
    id: str
    customer_name: str
    contact_info: str
    items: list[LineItemSchema]
    subtotal: Decimal
    discount: Decimal
    price: Decimal
    deposit_paid: Decimal
    description: str
    status: str
    assigned_to: Optional[str] = None
    assigned_to_name: Optional[str] = None
    notes: str
    checklist: list[ChecklistEntrySchema]
    source_quote_id: Optional[str] = None
    created_by: Optional[str] = None
    created_by_name: Optional[str] = None
    created_at: str
    updated_at: str
    version: int


class OrderCreateRequest(BaseModel):
    customer_name: str
    contact_info: str = ""
    items: list[LineItemSchema] = Field(default_factory=list)
    discount: Decimal = Decimal("0")
    price: Optional[Decimal] = Field(
        default=None, description="Hand-entered price, used only when there are no items"
    )
    deposit_paid: Decimal = Decimal("0")
    description: str = ""
    assigned_to: Optional[str] = None
    assigned_to_name: Optional[str] = None
    notes: str = ""


class OrderUpdateRequest(BaseModel):
    customer_name: Optional[str] = None
    contact_info: Optional[str] = None
    items: Optional[list[LineItemSchema]] = None
    discount: Optional[Decimal] = None
    price: Optional[Decimal] = None
    deposit_paid: Optional[Decimal] = None
    description: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_to_name: Optional[str] = None
    notes: Optional[str] = None


class OrderListResponse(BaseModel):
    orders: list[OrderSchema]
    count: int


class ChecklistProgressSchema(BaseModel):
    checked: int
    total: int
    percent: float


class ChecklistResponse(BaseModel):
    order_id: str
    entries: list[ChecklistEntrySchema]
    progress: ChecklistProgressSchema


class OrderStatsSchema(BaseModel):
    total_outstanding: Decimal
    total_deposits: Decimal
    completed_today: int
    pending_deliveries: int


class QuoteSchema(BaseModel):
    id: str
    customer_name: str
    contact_info: str
    items: list[LineItemSchema]
    subtotal: Decimal
    discount: Decimal
    estimated_price: Decimal
    requested_items: str
    notes: str
    status: str
    converted_order_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: str
    updated_at: str
    version: int


class QuoteCreateRequest(BaseModel):
    customer_name: str
    contact_info: str = ""
    items: list[LineItemSchema] = Field(default_factory=list)
    discount: Decimal = Decimal("0")
    estimated_price: Optional[Decimal] = None
    requested_items: str = ""
    notes: str = ""


class QuoteUpdateRequest(BaseModel):
    customer_name: Optional[str] = None
    contact_info: Optional[str] = None
    items: Optional[list[LineItemSchema]] = None
    discount: Optional[Decimal] = None
    estimated_price: Optional[Decimal] = None
    requested_items: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None


class QuoteListResponse(BaseModel):
    quotes: list[QuoteSchema]
    count: int


class ReconcileOutcomeSchema(BaseModel):
    quote_id: str
    outcome: str
    order_id: Optional[str] = None


class ReconcileResponse(BaseModel):
    outcomes: list[ReconcileOutcomeSchema]
    count: int


class FundBalanceResponse(BaseModel):
    balance: Decimal


class FundOperationRequest(BaseModel):
    amount: Decimal
    description: str = ""


class FundAdjustRequest(BaseModel):
    new_balance: Decimal
    description: str = ""


class FundLogEntrySchema(BaseModel):
    id: str
    type: str
    amount: Decimal
    description: str
    balance_after: Decimal
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    at: str


class FundHistoryResponse(BaseModel):
    entries: list[FundLogEntrySchema]
    count: int


class PinSchema(BaseModel):
    id: str
    x_pct: float
    y_pct: float
    title: str
    description: str
    category: str
    created_by: Optional[str] = None
    created_by_name: Optional[str] = None
    created_at: str


class PinCreateRequest(BaseModel):
    x_pct: float = Field(..., ge=0, le=100)
    y_pct: float = Field(..., ge=0, le=100)
    title: str
    description: str = ""
    category: str = "other"


class PinListResponse(BaseModel):
    pins: list[PinSchema]
    count: int


class CatalogItemSchema(BaseModel):
    id: str
    name: str
    price: Decimal
    category: str
    created_at: str
    updated_at: str


class CatalogCreateRequest(BaseModel):
    name: str
    price: Decimal
    category: str = "other"


class CatalogUpdateRequest(BaseModel):
    name: Optional[str] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None


class CatalogListResponse(BaseModel):
    items: list[CatalogItemSchema]
    count: int


class TodoSchema(BaseModel):
    id: str
    title: str
    description: str
    assigned_role: Optional[str] = None
    is_completed: bool
    completed_by: Optional[str] = None
    completed_by_name: Optional[str] = None
    completed_at: Optional[str] = None
    sort_order: int
    created_by: Optional[str] = None
    created_at: str
    updated_at: str


class TodoCreateRequest(BaseModel):
    title: str
    description: str = ""
    assigned_role: Optional[str] = None
    sort_order: int = 0


class TodoListResponse(BaseModel):
    todos: list[TodoSchema]
    count: int


class RanchLogSchema(BaseModel):
    id: str
    description: str
    category: str
    amount: Optional[Decimal] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    created_at: str


class LogCreateRequest(BaseModel):
    description: str
    amount: Optional[Decimal] = None
    category: str = "misc"


class LogListResponse(BaseModel):
    logs: list[RanchLogSchema]
    count: int


class IngredientSchema(BaseModel):
    name: str
    quantity: str = ""


class RecipeSchema(BaseModel):
    id: str
    name: str
    description: str
    location: str
    ingredients: list[IngredientSchema]
    created_by: Optional[str] = None
    created_by_name: Optional[str] = None
    created_at: str
    updated_at: str
    version: int


class RecipeCreateRequest(BaseModel):
    name: str
    description: str = ""
    location: str = ""
    ingredients: list[IngredientSchema] = Field(default_factory=list)


class RecipeUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    ingredients: Optional[list[IngredientSchema]] = None


class RecipeListResponse(BaseModel):
    book: str
    recipes: list[RecipeSchema]
    count: int


class PosterSchema(BaseModel):
    id: str
    title: str
    filename: str
    content_type: str
    size: int
    uploaded_by: Optional[str] = None
    uploaded_by_name: Optional[str] = None
    created_at: str


class PosterListResponse(BaseModel):
    posters: list[PosterSchema]
    count: int


class ActivityEntrySchema(BaseModel):
    id: str
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    at: str


class ActivityListResponse(BaseModel):
    entries: list[ActivityEntrySchema]
    count: int


class PricingRequest(BaseModel):
    items: list[LineItemSchema]
    discount: Decimal = Decimal("0")


class PricingResponse(BaseModel):
    subtotal: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    total: Decimal
    description: str


class ErrorResponse(BaseModel):
    detail: str
    error_type: str


# --- Helper Functions ---


def get_ranch() -> Ranch:
    """Get services over the configured data directory."""
    return Ranch(config.DATA_DIR)


def get_actor(
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_name: Optional[str] = Header(default=None),
    x_actor_role: Optional[str] = Header(default=None),
) -> Actor:
    """
    Build the acting user from identity headers.

    The identity provider in front of this API authenticates the user and
    sets these headers; requests without them act as an anonymous guest.
    """
    if not x_actor_id:
        return Actor(id="anonymous", name="Anonymous", role="guest")
    return Actor(id=x_actor_id, name=x_actor_name or x_actor_id, role=x_actor_role or "guest")


def order_to_schema(order: Order) -> OrderSchema:
    return OrderSchema(**order.to_dict())


def quote_to_schema(quote: Quote) -> QuoteSchema:
    return QuoteSchema(**quote.to_dict())


def pin_to_schema(pin: MapPin) -> PinSchema:
    return PinSchema(**pin.to_dict())


def catalog_item_to_schema(item: CatalogItem) -> CatalogItemSchema:
    return CatalogItemSchema(**item.to_dict())


def todo_to_schema(todo: Todo) -> TodoSchema:
    return TodoSchema(**todo.to_dict())


def log_to_schema(entry: RanchLog) -> RanchLogSchema:
    return RanchLogSchema(**entry.to_dict())


def recipe_to_schema(recipe: Recipe) -> RecipeSchema:
    return RecipeSchema(**recipe.to_dict())


def poster_to_schema(poster: Poster) -> PosterSchema:
    data = poster.to_dict()
    data.pop("storage_path")
    return PosterSchema(**data)


# --- FastAPI App ---


app = FastAPI(
    title="ranchhand API",
    description="Orders, quotes, ranch fund and map pins for the ranch",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Global Exception Handler ---


# Map exception types to HTTP status codes (most specific class wins)
ERROR_STATUS_CODES: dict[type, int] = {
    NotFoundError: 404,
    ValidationError: 400,
    QuoteAlreadyConvertedError: 409,
    ConcurrentUpdateError: 409,
    PermissionDeniedError: 403,
    TransientIOError: 503,
}


def status_code_for(exc: RanchError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


@app.exception_handler(RanchError)
async def ranch_error_handler(request: Request, exc: RanchError) -> JSONResponse:
    """Map RanchError subclasses to appropriate HTTP responses."""
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


# --- Endpoints ---


@app.get("/api/health")
def health_check():
    """Health check endpoint. Read-only: never writes to the data directory."""
    ranch = get_ranch()
    try:
        balance = ranch.fund.balance()
        return {"status": "ok", "data_dir": str(ranch.store.data_dir), "fund_balance": str(balance)}
    except RanchError as e:
        return {"status": "error", "detail": str(e)}


# --- Order Endpoints ---


@app.get("/api/orders", response_model=OrderListResponse)
def list_orders(
    status: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
):
    """List orders, newest first."""
    orders = get_ranch().orders.list(status=status, search=search)
    return OrderListResponse(orders=[order_to_schema(o) for o in orders], count=len(orders))


@app.post("/api/orders", response_model=OrderSchema, status_code=201)
def create_order(request: OrderCreateRequest, actor: Actor = Depends(get_actor)):
    order = get_ranch().orders.create(request.model_dump(), actor)
    return order_to_schema(order)


@app.get("/api/orders/stats", response_model=OrderStatsSchema)
def order_stats():
    stats = get_ranch().orders.stats()
    return OrderStatsSchema(**stats.to_dict())


@app.get("/api/orders/{order_id}", response_model=OrderSchema)
def get_order(order_id: str):
    return order_to_schema(get_ranch().orders.get(order_id))


@app.patch("/api/orders/{order_id}", response_model=OrderSchema)
def update_order(order_id: str, request: OrderUpdateRequest, actor: Actor = Depends(get_actor)):
    """
    Update an order.

    Moving an order to "delivered" deposits its price into the ranch fund.
    """
    update_data = request.model_dump(exclude_unset=True)
    order = get_ranch().orders.update(order_id, update_data, actor)
    return order_to_schema(order)


@app.delete("/api/orders/{order_id}", response_model=OrderSchema)
def delete_order(order_id: str, actor: Actor = Depends(get_actor)):
    return order_to_schema(get_ranch().orders.delete(order_id, actor))


@app.get("/api/orders/{order_id}/checklist", response_model=ChecklistResponse)
def get_order_checklist(order_id: str):
    orders = get_ranch().orders
    order = orders.get(order_id)
    progress = orders.checklist_progress(order_id)
    return ChecklistResponse(
        order_id=order.id,
        entries=[ChecklistEntrySchema(**e.to_dict()) for e in order.checklist],
        progress=ChecklistProgressSchema(
            checked=progress.checked, total=progress.total, percent=progress.percent
        ),
    )


@app.post("/api/orders/{order_id}/checklist/{index}/toggle", response_model=OrderSchema)
def toggle_order_checklist_item(order_id: str, index: int, actor: Actor = Depends(get_actor)):
    order = get_ranch().orders.toggle_checklist_item(order_id, index, actor)
    return order_to_schema(order)


# --- Quote Endpoints ---


@app.get("/api/quotes", response_model=QuoteListResponse)
def list_quotes(
    status: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
):
    quotes = get_ranch().quotes.list(status=status, search=search)
    return QuoteListResponse(quotes=[quote_to_schema(q) for q in quotes], count=len(quotes))


@app.post("/api/quotes", response_model=QuoteSchema, status_code=201)
def create_quote(request: QuoteCreateRequest, actor: Actor = Depends(get_actor)):
    quote = get_ranch().quotes.create(request.model_dump(), actor)
    return quote_to_schema(quote)


@app.post("/api/quotes/reconcile", response_model=ReconcileResponse)
def reconcile_quotes(actor: Actor = Depends(get_actor)):
    """Finish or undo quote conversions that were interrupted."""
    outcomes = get_ranch().quotes.reconcile_conversions(actor)
    return ReconcileResponse(
        outcomes=[
            ReconcileOutcomeSchema(quote_id=o.quote_id, outcome=o.outcome, order_id=o.order_id)
            for o in outcomes
        ],
        count=len(outcomes),
    )


@app.get("/api/quotes/{quote_id}", response_model=QuoteSchema)
def get_quote(quote_id: str):
    return quote_to_schema(get_ranch().quotes.get(quote_id))


@app.patch("/api/quotes/{quote_id}", response_model=QuoteSchema)
def update_quote(quote_id: str, request: QuoteUpdateRequest, actor: Actor = Depends(get_actor)):
    update_data = request.model_dump(exclude_unset=True)
    return quote_to_schema(get_ranch().quotes.update(quote_id, update_data, actor))


@app.delete("/api/quotes/{quote_id}", response_model=QuoteSchema)
def delete_quote(quote_id: str, actor: Actor = Depends(get_actor)):
    return quote_to_schema(get_ranch().quotes.delete(quote_id, actor))


@app.post("/api/quotes/{quote_id}/convert", response_model=OrderSchema, status_code=201)
def convert_quote(quote_id: str, actor: Actor = Depends(get_actor)):
    """Create an order from a quote and mark the quote accepted."""
    order = get_ranch().quotes.convert(quote_id, actor)
    return order_to_schema(order)


# --- Ranch Fund Endpoints ---


@app.get("/api/fund", response_model=FundBalanceResponse)
def get_fund_balance():
    return FundBalanceResponse(balance=get_ranch().fund.balance())


@app.get("/api/fund/history", response_model=FundHistoryResponse)
def get_fund_history(limit: int = Query(default=50, ge=1, le=500)):
    entries = get_ranch().fund.history(limit=limit)
    return FundHistoryResponse(
        entries=[FundLogEntrySchema(**e.to_dict()) for e in entries],
        count=len(entries),
    )


@app.post("/api/fund/deposit", response_model=FundLogEntrySchema, status_code=201)
def fund_deposit(request: FundOperationRequest, actor: Actor = Depends(get_actor)):
    entry = get_ranch().fund.deposit(request.amount, request.description, actor)
    return FundLogEntrySchema(**entry.to_dict())


@app.post("/api/fund/withdraw", response_model=FundLogEntrySchema, status_code=201)
def fund_withdraw(request: FundOperationRequest, actor: Actor = Depends(get_actor)):
    entry = get_ranch().fund.withdraw(request.amount, request.description, actor)
    return FundLogEntrySchema(**entry.to_dict())


@app.post("/api/fund/adjust", response_model=FundLogEntrySchema, status_code=201)
def fund_adjust(request: FundAdjustRequest, actor: Actor = Depends(get_actor)):
    entry = get_ranch().fund.adjust(request.new_balance, request.description, actor)
    return FundLogEntrySchema(**entry.to_dict())


# --- Map Pin Endpoints ---


@app.get("/api/pins", response_model=PinListResponse)
def list_pins(category: Optional[str] = Query(default=None)):
    pins = get_ranch().pins.list_pins(category=category)
    return PinListResponse(pins=[pin_to_schema(p) for p in pins], count=len(pins))


@app.post("/api/pins", response_model=PinSchema, status_code=201)
def create_pin(request: PinCreateRequest, actor: Actor = Depends(get_actor)):
    pin = get_ranch().pins.place_pin(
        request.x_pct, request.y_pct, request.title, request.description, request.category, actor
    )
    return pin_to_schema(pin)


@app.get("/api/pins/{pin_id}", response_model=PinSchema)
def get_pin(pin_id: str):
    return pin_to_schema(get_ranch().pins.get_pin(pin_id))


@app.delete("/api/pins/{pin_id}", response_model=PinSchema)
def delete_pin(pin_id: str, actor: Actor = Depends(get_actor)):
    return pin_to_schema(get_ranch().pins.delete_pin(pin_id, actor))


# --- Catalog Endpoints ---


@app.get("/api/catalog", response_model=CatalogListResponse)
def list_catalog(
    category: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
):
    items = get_ranch().catalog.list(category=category, search=search)
    return CatalogListResponse(items=[catalog_item_to_schema(i) for i in items], count=len(items))


@app.post("/api/catalog", response_model=CatalogItemSchema, status_code=201)
def create_catalog_item(request: CatalogCreateRequest, actor: Actor = Depends(get_actor)):
    item = get_ranch().catalog.create(request.name, request.price, request.category, actor)
    return catalog_item_to_schema(item)


@app.post("/api/catalog/import-defaults", response_model=CatalogListResponse)
def import_default_catalog(actor: Actor = Depends(get_actor)):
    added = get_ranch().catalog.import_defaults(actor)
    return CatalogListResponse(items=[catalog_item_to_schema(i) for i in added], count=len(added))


@app.patch("/api/catalog/{item_id}", response_model=CatalogItemSchema)
def update_catalog_item(item_id: str, request: CatalogUpdateRequest, actor: Actor = Depends(get_actor)):
    update_data = request.model_dump(exclude_unset=True)
    return catalog_item_to_schema(get_ranch().catalog.update(item_id, update_data, actor))


@app.delete("/api/catalog/{item_id}", response_model=CatalogItemSchema)
def delete_catalog_item(item_id: str, actor: Actor = Depends(get_actor)):
    return catalog_item_to_schema(get_ranch().catalog.delete(item_id, actor))


# --- Todo Endpoints ---


@app.get("/api/todos", response_model=TodoListResponse)
def list_todos():
    todos = get_ranch().todos.list()
    return TodoListResponse(todos=[todo_to_schema(t) for t in todos], count=len(todos))


@app.post("/api/todos", response_model=TodoSchema, status_code=201)
def create_todo(request: TodoCreateRequest, actor: Actor = Depends(get_actor)):
    return todo_to_schema(get_ranch().todos.create(request.model_dump(), actor))


@app.post("/api/todos/{todo_id}/toggle", response_model=TodoSchema)
def toggle_todo(todo_id: str, actor: Actor = Depends(get_actor)):
    return todo_to_schema(get_ranch().todos.toggle(todo_id, actor))


@app.delete("/api/todos/{todo_id}", response_model=TodoSchema)
def delete_todo(todo_id: str, actor: Actor = Depends(get_actor)):
    return todo_to_schema(get_ranch().todos.delete(todo_id, actor))


# --- Ranch Log Endpoints ---


@app.get("/api/logs", response_model=LogListResponse)
def list_logs(
    category: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
):
    entries = get_ranch().logs.list(category=category, limit=limit)
    return LogListResponse(logs=[log_to_schema(e) for e in entries], count=len(entries))


@app.post("/api/logs", response_model=RanchLogSchema, status_code=201)
def create_log(request: LogCreateRequest, actor: Actor = Depends(get_actor)):
    return log_to_schema(get_ranch().logs.create(request.model_dump(), actor))


@app.delete("/api/logs/{log_id}", response_model=RanchLogSchema)
def delete_log(log_id: str, actor: Actor = Depends(get_actor)):
    return log_to_schema(get_ranch().logs.delete(log_id, actor))


# --- Recipe Book Endpoints ---


@app.get("/api/books/{book}", response_model=RecipeListResponse)
def list_recipes(book: str, search: Optional[str] = Query(default=None)):
    """List a recipe book ("recipes" or "crafting")."""
    recipes = get_ranch().recipe_book(book).list(search=search)
    return RecipeListResponse(
        book=book, recipes=[recipe_to_schema(r) for r in recipes], count=len(recipes)
    )


@app.post("/api/books/{book}", response_model=RecipeSchema, status_code=201)
def create_recipe(book: str, request: RecipeCreateRequest, actor: Actor = Depends(get_actor)):
    recipe = get_ranch().recipe_book(book).create(request.model_dump(), actor)
    return recipe_to_schema(recipe)


@app.get("/api/books/{book}/{recipe_id}", response_model=RecipeSchema)
def get_recipe(book: str, recipe_id: str):
    return recipe_to_schema(get_ranch().recipe_book(book).get(recipe_id))


@app.patch("/api/books/{book}/{recipe_id}", response_model=RecipeSchema)
def update_recipe(
    book: str, recipe_id: str, request: RecipeUpdateRequest, actor: Actor = Depends(get_actor)
):
    update_data = request.model_dump(exclude_unset=True)
    return recipe_to_schema(get_ranch().recipe_book(book).update(recipe_id, update_data, actor))


@app.delete("/api/books/{book}/{recipe_id}", response_model=RecipeSchema)
def delete_recipe(book: str, recipe_id: str, actor: Actor = Depends(get_actor)):
    return recipe_to_schema(get_ranch().recipe_book(book).delete(recipe_id, actor))


# --- Poster Endpoints ---


@app.get("/api/posters", response_model=PosterListResponse)
def list_posters():
    posters = get_ranch().posters.list()
    return PosterListResponse(posters=[poster_to_schema(p) for p in posters], count=len(posters))


@app.post("/api/posters", response_model=PosterSchema, status_code=201)
async def upload_poster(
    request: Request,
    title: str = Query(...),
    filename: str = Query(...),
    actor: Actor = Depends(get_actor),
):
    """Upload a poster. The request body is the raw image."""
    data = await request.body()
    poster = get_ranch().posters.upload(
        title, filename, data, actor, content_type=request.headers.get("content-type")
    )
    return poster_to_schema(poster)


@app.get("/api/posters/{poster_id}", response_model=PosterSchema)
def get_poster(poster_id: str):
    return poster_to_schema(get_ranch().posters.get(poster_id))


@app.get("/api/posters/{poster_id}/image")
def get_poster_image(poster_id: str):
    poster, data = get_ranch().posters.read_image(poster_id)
    return Response(content=data, media_type=poster.content_type)


@app.delete("/api/posters/{poster_id}", response_model=PosterSchema)
def delete_poster(poster_id: str, actor: Actor = Depends(get_actor)):
    return poster_to_schema(get_ranch().posters.delete(poster_id, actor))


# --- Activity / Pricing Endpoints ---


@app.get("/api/activity", response_model=ActivityListResponse)
def list_activity(limit: int = Query(default=config.ACTIVITY_FEED_DEFAULT_LIMIT, ge=1, le=200)):
    entries = get_ranch().activity.recent(limit=limit)
    return ActivityListResponse(
        entries=[ActivityEntrySchema(**e.to_dict()) for e in entries],
        count=len(entries),
    )


@app.post("/api/pricing/quote", response_model=PricingResponse)
def price_items(request: PricingRequest):
    """Price an item list without storing anything."""
    items = parse_line_items([i.model_dump() for i in request.items])
    totals = compute_totals(items, request.discount)
    return PricingResponse(**totals.to_dict(), description=describe_items(items))
