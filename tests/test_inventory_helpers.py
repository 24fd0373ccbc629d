from datetime import date

from resale_inventory.domain.inventory import (
    calculate_days_listed,
    calculate_net_profit,
    calculate_purchase_stats,
    filter_items,
    format_currency,
    generate_condition_report,
    generate_listing_description,
    get_unique_values,
    sort_items,
)

ITEMS = [
    {"item_id": "a", "purchase_id": "p1", "item_name": "Wool Coat", "brand": "Zara", "category": "Clothing",
     "status": "Sold", "sale_price": 80.0, "platform_fees": 5.0, "allocated_cost": 40.0, "notes": ""},
    {"item_id": "b", "purchase_id": "p1", "item_name": "brass lamp", "brand": "", "category": "Home",
     "status": "Listed", "sale_price": None, "platform_fees": 0.0, "allocated_cost": 2.5, "notes": "needs bulb"},
    {"item_id": "c", "purchase_id": "p2", "item_name": "Camera Bag", "brand": "Gucci", "category": "Accessories",
     "status": "Unlisted", "sale_price": None, "platform_fees": 0.0, "allocated_cost": 7.0, "notes": ""},
]


def test_net_profit():
    assert calculate_net_profit(25, 2.5, 10) == 12.5
    assert calculate_net_profit(5, None, 10) == -5.0
    assert calculate_net_profit(None, 1, 1) is None


def test_purchase_stats_active():
    stats = calculate_purchase_stats({"purchase_id": "p1", "total_purchase_cost": 100.0}, ITEMS)

    assert stats == {
        "item_count": 2,
        "sold_count": 1,
        "listed_count": 1,
        "revenue": 80.0,
        "profit": -25.0,
        "status": "Active",
    }


def test_purchase_stats_status_rules():
    completed = calculate_purchase_stats({"purchase_id": "p1"}, [dict(ITEMS[0])])
    untouched = calculate_purchase_stats({"purchase_id": "p2"}, ITEMS)
    empty = calculate_purchase_stats({"purchase_id": "p3"}, ITEMS)

    assert completed["status"] == "Completed"
    assert untouched["status"] == "Not Started"
    assert empty["status"] == "Not Started"
    assert empty["item_count"] == 0


def test_days_listed():
    assert calculate_days_listed("2024-01-01", "2024-01-11") == 10
    assert calculate_days_listed("2024-01-01", today=date(2024, 2, 1)) == 31
    assert calculate_days_listed(None) is None


def test_listing_description_skips_missing_fields():
    desc = generate_listing_description({"item_name": "Denim Jacket", "brand": "Levi's", "size": "M"})

    assert desc.startswith("Denim Jacket")
    assert "Brand: Levi's" in desc
    assert "Size: M" in desc
    assert "Category:" not in desc
    assert desc.rstrip().endswith("[Add return policy]")


def test_condition_report_template():
    report = generate_condition_report()

    assert report.startswith("CONDITION REPORT")
    assert "[ ] New with tags" in report
    assert "Additional Notes:" in report


def test_sort_numeric_and_text():
    by_cost = sort_items(ITEMS, "allocated_cost")
    by_name_desc = sort_items(ITEMS, "item_name", "desc")
    by_price = sort_items(ITEMS, "sale_price")

    assert [it["item_id"] for it in by_cost] == ["b", "c", "a"]
    assert [it["item_id"] for it in by_name_desc] == ["a", "c", "b"]
    # missing values sort as empty text, ahead of "80.0"
    assert [it["item_id"] for it in by_price] == ["b", "c", "a"]


def test_filter_items():
    assert [it["item_id"] for it in filter_items(ITEMS, {"purchase": "p1"})] == ["a", "b"]
    assert [it["item_id"] for it in filter_items(ITEMS, {"brand": "Gucci"})] == ["c"]
    assert [it["item_id"] for it in filter_items(ITEMS, {"status": "Listed", "category": "Home"})] == ["b"]
    assert [it["item_id"] for it in filter_items(ITEMS, {"search": "BULB"})] == ["b"]
    assert len(filter_items(ITEMS, {})) == 3


def test_unique_values_and_currency():
    assert get_unique_values(ITEMS, "brand") == ["Gucci", "Zara"]
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-3) == "-$3.00"
    assert format_currency(None) == "-"


def test_sort_keeps_numbers_numeric_when_values_are_missing():
    rows = [
        {"item_id": "a", "sale_price": 100.0},
        {"item_id": "b", "sale_price": 25.0},
        {"item_id": "c", "sale_price": None},
        {"item_id": "d", "sale_price": 9.5},
    ]

    assert [it["item_id"] for it in sort_items(rows, "sale_price")] == ["c", "d", "b", "a"]
    assert [it["item_id"] for it in sort_items(rows, "sale_price", "desc")] == ["a", "b", "d", "c"]
