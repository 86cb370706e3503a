from decimal import Decimal

import pytest

from darah_server.cart import CartStore
from darah_server.inventory import Inventory
from darah_server.models import Item
from darah_server.storefront import Storefront


@pytest.fixture
def inventory():
    return Inventory(
        [
            Item(id="r1", name="Anel Solitário", category="Anéis", price=Decimal("100.00"), stock=2),
            Item(id="c1", name="Colar Pérola", category="Colares", price=Decimal("1250.50"), stock=5,
                 images=["https://cdn.example.com/colar.jpg"]),
            Item(id="b1", name="Brinco Gota", category="Brincos", price=Decimal("79.90"), stock=10),
            Item(id="off", name="Pulseira Antiga", category="Pulseiras", price=Decimal("60.00"), stock=3,
                 active=False),
            Item(id="zero", name="Tornozeleira", category="Pulseiras", price=Decimal("45.00"), stock=0),
        ]
    )

@pytest.fixture
def carts():
    return CartStore()

@pytest.fixture
def storefront(inventory, carts):
    return Storefront(inventory=inventory, carts=carts, whatsapp_number="+55 (51) 99999-9999")
