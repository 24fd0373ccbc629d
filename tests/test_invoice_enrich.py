from resale_inventory.domain.models import ItemDraft
from resale_inventory.invoice.enrich import enrich_item, infer_brand, infer_category, infer_size


def test_letter_sizes_are_whole_tokens():
    assert infer_size("Hoodie XL") == "XL"
    assert infer_size("Track Pants Size M") == "M"
    assert infer_size("Levi's Jeans") == ""
    assert infer_size("T-Shirt") == ""


def test_size_words_and_measures():
    assert infer_size("Wool Sweater medium") == "medium"
    assert infer_size("Coffee Beans 16 oz") == "16 oz"
    assert infer_size("Olive Oil 500ml") == "500ml"


def test_labeled_size():
    assert infer_size("Running Shoes Size 10") == "10"
    assert infer_size("Hoodie sz: 8") == "8"


def test_size_rule_order_wins():
    # letter size beats the labeled numeric size
    assert infer_size("Shorts L Size 32") == "L"


def test_brand_is_whole_word_case_insensitive():
    assert infer_brand("adidas shorts") == "Adidas"
    assert infer_brand("Louis Vuitton Speedy Bag") == "Louis Vuitton"
    assert infer_brand("H&M Basic Tee") == "H&M"
    assert infer_brand("Nikes knock-off") == ""


def test_brand_list_order_breaks_ties():
    assert infer_brand("Puma x Nike collab") == "Nike"


def test_category_table_order_breaks_ties():
    assert infer_category("Camera Bag") == "Accessories"
    assert infer_category("Shirt and Shoes") == "Clothing"
    assert infer_category("Brass Table Lamp") == "Home"
    assert infer_category("Artistic Print") == ""


def test_enrich_fills_only_empty_fields():
    item = ItemDraft(item_name="Nike Denim Jacket XS", brand="Thrift", category="Vintage")

    out = enrich_item(item)

    assert out.brand == "Thrift"
    assert out.category == "Vintage"
    assert out.size == "XS"
    assert item.size == ""


def test_letter_sizes_in_lower_case_but_not_possessives():
    assert infer_size("hoodie xl") == "xl"
    assert infer_size("Levi’s Jeans") == ""
    assert infer_size("Men's Parka") == ""
