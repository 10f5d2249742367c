import pytest
from src.config import Config
from src.database.local_store import LocalStore
from src.models.product import Product

IMAGES = [
    "https://img.example.com/black.jpg",
    "https://img.example.com/tan.jpg",
]

def _make_product(**fields) -> Product:
    data = {
        "id": "p1",
        "name": "Crossbody",
        "category": "bags",
        "price": 50,
        "images": list(IMAGES),
        "sizes": ["S", "M"],
        "stock": {},
    }
    data.update(fields)
    return Product.model_validate(data)

@pytest.fixture
def make_product():
    return _make_product

@pytest.fixture
def images():
    return list(IMAGES)

@pytest.fixture
def legacy_product():
    return _make_product(stock={"S": 3, "M": 0, "__discount_price": 40})

@pytest.fixture
def per_image_product():
    return _make_product(stock={
        "__mode": "per_image",
        "variants": [
            {"name": "Black", "description": "Smooth leather", "stock": {"S": 2, "M": 1}},
            {"name": "Tan", "description": "", "stock": {"S": 0}},
        ],
    })

@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "store.json")

@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "SEED_FILE", tmp_path / "no-seed.json")
    monkeypatch.setattr(Config, "CURRENCY_SYMBOL", "$")
    monkeypatch.setattr(Config, "SITE_NAME", "Baggo")
    monkeypatch.setattr(Config, "TIMEZONE", "UTC")
