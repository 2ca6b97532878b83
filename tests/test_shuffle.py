import random

from storefront.personalization.shuffle import permute, seed_from


def test_seed_is_rolling_polynomial_hash():
    assert seed_from("") == 0
    assert seed_from("a") == 97
    assert seed_from("ab") == 97 * 31 + 98


def test_seed_stays_in_32_bits_and_is_order_sensitive():
    long_material = "visitor-" * 200
    assert 0 <= seed_from(long_material) < 2**32
    assert seed_from("ab") != seed_from("ba")


def test_same_items_and_seed_give_same_order():
    items = list(range(30))
    assert permute(items, "guest_abc" + "electronics") == permute(items, "guest_abc" + "electronics")


def test_different_visitors_get_different_orders():
    items = list(range(30))
    assert permute(items, "guest_one" + "electronics") != permute(items, "guest_two" + "electronics")


def test_result_is_a_permutation():
    items = [f"p{i}" for i in range(25)]
    out = permute(items, "seed")
    assert sorted(out) == sorted(items)
    assert len(out) == len(items)


def test_input_is_not_mutated():
    items = [5, 4, 3, 2, 1]
    snapshot = list(items)
    out = permute(items, "anything")
    assert items == snapshot
    assert out is not items


def test_empty_and_single_element():
    assert permute([], "x") == []
    assert permute(["only"], "x") == ["only"]


def test_global_random_state_untouched():
    random.seed(1234)
    expected = random.random()

    random.seed(1234)
    permute(list(range(50)), "seed")
    assert random.random() == expected


def test_global_random_state_does_not_affect_result():
    random.seed(1)
    first = permute(list(range(20)), "seed")
    random.seed(2)
    assert permute(list(range(20)), "seed") == first


def test_accepts_tuples():
    assert permute((1, 2, 3, 4), "s") == permute([1, 2, 3, 4], "s")
