import json

from giftfinder.parsing import (
    NO_REASON,
    SingleObject,
    StructuredArray,
    StructuredWrapped,
    Unparseable,
    classify_payload,
    parse_marker_blocks,
    parse_suggestions,
    strip_code_fence,
)


def test_json_array_keeps_order_and_assigns_distinct_ids():
    items = [{"name": f"Gift {i}", "reason": f"Because {i}", "price": f"~£{i}0"} for i in range(3)]
    out = parse_suggestions(json.dumps(items))
    assert [s.name for s in out] == ["Gift 0", "Gift 1", "Gift 2"]
    assert [s.price for s in out] == ["~£00", "~£10", "~£20"]
    assert len({s.id for s in out}) == 3


def test_json_array_truncated_to_five():
    items = [{"name": f"Gift {i}", "reason": "r"} for i in range(8)]
    out = parse_suggestions(json.dumps(items))
    assert [s.name for s in out] == [f"Gift {i}" for i in range(5)]


def test_malformed_items_are_dropped():
    items = [
        {"name": "Good", "reason": "fits", "price": 25},
        {"name": "No reason"},
        {"name": 3, "reason": "bad name"},
        "just a string",
        None,
        {"name": "Also good", "reason": "fits too", "price": "£10"},
    ]
    out = parse_suggestions(json.dumps(items))
    assert [s.name for s in out] == ["Good", "Also good"]
    assert out[0].price is None  # non-string price is not copied
    assert out[1].price == "£10"


def test_fenced_json_with_language_tag():
    text = '```json\n[{"name": "Trowel set", "reason": "For the garden"}]\n```'
    out = parse_suggestions(text)
    assert len(out) == 1
    assert out[0].name == "Trowel set"


def test_wrapped_and_single_object_shapes():
    wrapped = json.dumps({"suggestions": [{"name": "A", "reason": "a"}, {"name": "B", "reason": "b"}]})
    assert [s.name for s in parse_suggestions(wrapped)] == ["A", "B"]

    single = json.dumps({"name": "Only one", "reason": "solo", "price": "£5"})
    out = parse_suggestions(single)
    assert len(out) == 1 and out[0].price == "£5"


def test_classify_payload_variants():
    assert isinstance(classify_payload("[]"), StructuredArray)
    assert isinstance(classify_payload('{"suggestions": []}'), StructuredWrapped)
    assert isinstance(classify_payload('{"name": "x", "reason": "y"}'), SingleObject)
    assert isinstance(classify_payload('{"name": "x"}'), Unparseable)
    assert isinstance(classify_payload("not json"), Unparseable)
    assert isinstance(classify_payload("42"), Unparseable)


def test_strip_code_fence_leaves_plain_text():
    assert strip_code_fence("  hello  ") == "hello"
    assert strip_code_fence("```\n[1]\n```") == "[1]"


def test_marker_fallback_two_blocks():
    text = (
        "Here are some ideas!\n"
        "###Suggestion\n"
        "Gift: Seed library subscription\n"
        "Reason: Keeps the garden fresh\n"
        "Price: £30\n"
        "###Suggestion\n"
        "GIFT: Sci-fi box set\n"
        "reason: They love the genre\n"
        "price: ~£45\n"
    )
    out = parse_suggestions(text)
    assert [(s.name, s.reason, s.price) for s in out] == [
        ("Seed library subscription", "Keeps the garden fresh", "£30"),
        ("Sci-fi box set", "They love the genre", "~£45"),
    ]
    assert out[0].id != out[1].id


def test_marker_fallback_first_label_wins_and_reason_default():
    text = "###Suggestion\nGift: First\nGift: Second\nPrice: £5\n###Suggestion\nReason: no name here\n"
    out = parse_marker_blocks(text)
    assert len(out) == 1
    assert out[0].name == "First"
    assert out[0].reason == NO_REASON
    assert out[0].price == "£5"


def test_json_with_no_valid_items_falls_back_to_markers():
    text = '[{"title": "wrong keys"}]'
    assert parse_suggestions(text) == []

    mixed = "###Suggestion\nGift: Mug\nReason: Tea lover"
    assert [s.name for s in parse_suggestions(mixed)] == ["Mug"]


def test_unparseable_text_without_markers_is_empty():
    assert parse_suggestions("Sorry, I couldn't find anything.") == []
    assert parse_suggestions("") == []


def test_deeply_nested_json_does_not_raise():
    nested = "[" * 100000 + "]" * 100000
    assert isinstance(classify_payload(nested), Unparseable)
    assert parse_suggestions(nested) == []


def test_deeply_nested_json_still_uses_marker_fallback():
    text = "[" * 100000 + "\n###Suggestion\nGift: Mug\nReason: Tea lover"
    assert [s.name for s in parse_suggestions(text)] == ["Mug"]
