from .catalog import Beer
from .customers import Customer
from .orders import (
    BeerOrder,
    BeerOrderLine,
    BeerOrderLineKey,
    BeerOrderLineStatus,
    BeerOrderStatus,
    UnsavedOrderLineError,
)

__all__ = [
    'Beer',
    'Customer',
    'BeerOrder', 'BeerOrderLine', 'BeerOrderLineKey',
    'BeerOrderStatus', 'BeerOrderLineStatus', 'UnsavedOrderLineError',
]
