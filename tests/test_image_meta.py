from src.catalog.image_meta import index_of, meta_for

def test_index_of(per_image_product, images):
    assert index_of(per_image_product, images[1]) == 1
    assert index_of(per_image_product, "blob:https://shop/1234") == 0
    assert index_of(per_image_product, None) == 0
    assert index_of(None, images[1]) == 0

def test_per_image_meta_comes_from_variants(per_image_product):
    meta = meta_for(per_image_product, 0)
    assert (meta.name, meta.description, meta.index) == ("Black", "Smooth leather", 0)
    meta = meta_for(per_image_product, 1)
    assert (meta.name, meta.description, meta.index) == ("Tan", "", 1)

def test_legacy_meta_comes_from_side_array(make_product):
    product = make_product(stock={
        "S": 1,
        "__image_meta": [{"name": "Front"}, {"name": "Back", "description": None}],
    })
    assert meta_for(product, 0).name == "Front"
    assert meta_for(product, 0).description == ""
    assert meta_for(product, 1).name == "Back"
    assert meta_for(product, 1).description == ""

def test_missing_meta_is_blank(legacy_product, per_image_product):
    for product in (legacy_product, per_image_product):
        meta = meta_for(product, 5)
        assert (meta.name, meta.description, meta.index) == ("", "", 5)

def test_bad_index(per_image_product):
    assert meta_for(per_image_product, "x").index == 0
    assert meta_for(per_image_product, -2).index == 0
    assert meta_for(None, 1).name == ""
