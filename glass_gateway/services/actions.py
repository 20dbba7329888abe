# -*- coding: utf-8 -*-
"""
Body builders for pdaservice.asmx actions.

Every action is rendered in the document/literal form the WSDL describes:
an unprefixed action element carrying the vendor namespace as its default
namespace, children unqualified, and a trailing callResult placeholder.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Tuple, Any
from xml.sax.saxutils import escape

from glass_gateway.models import Credentials, StockItem, VehicleStockQuery, OrderRequest

CALL_RESULT_XML = "<callResult><Status>None</Status><ErrorMessage></ErrorMessage></callResult>"

# Field order matches the StockItem complex type in the WSDL
STOCK_ITEM_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("_branch", "branch"),
    ("_catID", "cat_id"),
    ("_magCode", "mag_code"),
    ("_argicCode", "argic_code"),
    ("_model", "model"),
    ("_qty", "qty"),
    ("_price", "price"),
    ("_customerProductID", "customer_product_id"),
)

# Left out of order lines when empty
OPTIONAL_STOCK_ITEM_FIELDS = {"_branch", "_magCode", "_argicCode", "_model", "_customerProductID"}

_BUILDERS: Dict[str, Callable[..., str]] = {}


def _element(name: str, value: Any) -> str:
    if value is None:
        value = ""
    return f"<{name}>{escape(str(value))}</{name}>"


def _action(name: str, namespace: str, children: Iterable[str], call_result: bool = True) -> str:
    inner = "".join(children)
    if call_result:
        inner += CALL_RESULT_XML
    ns = escape(namespace, {'"': "&quot;"})
    return f'<{name} xmlns="{ns}">{inner}</{name}>'


def _stock_item(tag: str, item: StockItem, skip_empty: bool = False) -> str:
    fields = "".join(
        _element(xml_name, getattr(item, attr))
        for xml_name, attr in STOCK_ITEM_FIELDS
        if not (skip_empty and xml_name in OPTIONAL_STOCK_ITEM_FIELDS and not getattr(item, attr))
    )
    return f"<{tag}>{fields}</{tag}>"


def builder(action: str):
    """Register a body builder for a vendor action"""
    def register(func: Callable[..., str]) -> Callable[..., str]:
        _BUILDERS[action] = func
        return func
    return register


def registered_actions() -> List[str]:
    return sorted(_BUILDERS)


def build_body(action: str, namespace: str, **params) -> str:
    """
    Render the body element for ``action``.

    Raises:
        KeyError: no builder registered for the action
    """
    try:
        func = _BUILDERS[action]
    except KeyError:
        raise KeyError(f"No body builder for SOAP action: {action}") from None
    return func(namespace, **params)


# ==================== Reference Data ====================

@builder("HelloWorld")
def hello_world(namespace: str) -> str:
    return _action("HelloWorld", namespace, [], call_result=False)


@builder("GetLocations")
def get_locations(namespace: str) -> str:
    return _action("GetLocations", namespace, [])


@builder("GetDepots")
def get_depots(namespace: str, credentials: Credentials) -> str:
    login_details = (
        "<loginDetails>"
        + _element("accountCode", credentials.login)
        + _element("Password", credentials.password.get_secret_value())
        + _element("accountID", credentials.user_id)
        + "</loginDetails>"
    )
    return _action("GetDepots", namespace, [login_details])


@builder("GetMakes")
def get_makes(namespace: str) -> str:
    return _action("GetMakes", namespace, [])


@builder("GetModels")
def get_models(namespace: str, make: str) -> str:
    return _action("GetModels", namespace, [_element("make", make)])


@builder("getDeliveryCodes")
def get_delivery_codes(namespace: str) -> str:
    return _action("getDeliveryCodes", namespace, [])


# ==================== Stock ====================

@builder("getStockList")
def get_stock_list(namespace: str, query: VehicleStockQuery) -> str:
    return _action("getStockList", namespace, [
        _element("make", query.make),
        _element("model", query.model),
        _element("modelType", query.model_type),
        _element("year", query.year),
    ])


@builder("StockSearch")
def stock_search(namespace: str, argic_code: str, location: str = "") -> str:
    return _action("StockSearch", namespace, [
        _element("argic", argic_code),
        _element("location", location),
    ])


@builder("checkAvailability")
def check_availability(
    namespace: str,
    argic_code: str,
    qty: int = 1,
    depot: str = "",
    date_required: datetime = None,
    customer_product_id: str = "",
) -> str:
    date_required = date_required or datetime.now(timezone.utc)
    # callResult sits between customerProductID and qty in the WSDL sequence
    children = [
        _element("argicCode", argic_code),
        _element("customerProductID", customer_product_id),
        CALL_RESULT_XML,
        _element("qty", qty),
        _element("depot", depot),
        _element("dateRequired", date_required.isoformat()),
    ]
    return _action("checkAvailability", namespace, children, call_result=False)


@builder("getBranchAvailability")
def get_branch_availability(namespace: str, argic_code: str) -> str:
    return _action("getBranchAvailability", namespace, [_element("argicCode", argic_code)])


@builder("CheckkOtherDepots")
def check_other_depots(namespace: str, stock_item: StockItem, location: str) -> str:
    return _action("CheckkOtherDepots", namespace, [
        _stock_item("stockItm", stock_item),
        _element("location", location),
    ])


# ==================== Orders ====================

@builder("StockOrder")
def stock_order(namespace: str, order: OrderRequest) -> str:
    items = "".join(_stock_item("StockItem", item, skip_empty=True) for item in order.stock_items)
    return _action("StockOrder", namespace, [
        f"<stockCriteria>{items}</stockCriteria>",
        _element("purchaseOrderNo", order.purchase_order_no),
        _element("location", order.depot),
        _element("deliveryID", order.delivery_id),
        _element("comment", order.comment),
    ])
