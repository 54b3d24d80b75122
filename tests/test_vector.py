import threading

import pytest

from mqttedge.vector import BoundedVector, VectorError


def test_default_capacity():
    assert BoundedVector().capacity() == 32


def test_append_and_get_keep_order():
    v = BoundedVector()
    for item in ["a", "b", "c"]:
        v.append(item)
    assert list(v) == ["a", "b", "c"]
    assert v.get(0) == "a"
    assert v.get(2) == "c"
    assert len(v) == 3


def test_get_out_of_range():
    v = BoundedVector()
    v.append("a")
    with pytest.raises(VectorError) as err:
        v.get(1)
    assert err.value.code == "overflow"
    with pytest.raises(VectorError):
        v.get(-1)


def test_tail_room_is_three_quarters():
    cap = 16
    v = BoundedVector(cap)
    added = 0
    with pytest.raises(VectorError) as err:
        while True:
            v.append(added)
            added += 1
    assert err.value.code == "overflow"
    assert added == cap - cap // 4
    assert list(v) == list(range(added))


def test_head_room_is_one_quarter():
    cap = 16
    v = BoundedVector(cap)
    pushed = 0
    with pytest.raises(VectorError):
        while True:
            v.push_head(pushed)
            pushed += 1
    assert pushed == cap // 4
    assert list(v) == list(reversed(range(pushed)))


def test_pop_head_and_tail():
    v = BoundedVector()
    for item in [1, 2, 3]:
        v.append(item)
    assert v.pop_head() == 1
    assert v.pop_tail() == 3
    assert list(v) == [2]


def test_pop_empty_raises():
    v = BoundedVector()
    with pytest.raises(VectorError) as err:
        v.pop_head()
    assert err.value.code == "empty"
    with pytest.raises(VectorError):
        v.pop_tail()


def test_push_head_then_pop_head_round_trip():
    v = BoundedVector()
    v.append("x")
    v.push_head("y")
    assert v.pop_head() == "y"
    assert list(v) == ["x"]


def test_insert_in_middle_and_past_end():
    v = BoundedVector()
    v.append("a")
    v.append("c")
    v.insert("b", 1)
    v.insert("z", 99)
    v.insert("start", 0)
    assert list(v) == ["start", "a", "b", "c", "z"]


def test_delete_returns_entry_and_shifts():
    v = BoundedVector()
    for item in ["a", "b", "c"]:
        v.append(item)
    assert v.delete(1) == "b"
    assert list(v) == ["a", "c"]
    with pytest.raises(VectorError):
        v.delete(2)
    with pytest.raises(VectorError):
        v.delete(-1)


def test_index():
    v = BoundedVector()
    marker = object()
    v.append("a")
    v.append(marker)
    assert v.index(marker) == 1
    assert v.index("a") == 0
    with pytest.raises(VectorError) as err:
        v.index("missing")
    assert err.value.code == "empty"


def test_extend():
    dest = BoundedVector()
    src = BoundedVector()
    dest.append(1)
    src.append(2)
    src.append(3)
    dest.extend(src)
    dest.extend(None)
    assert list(dest) == [1, 2, 3]
    assert list(src) == [2, 3]


def test_extend_overflow_leaves_destination_unchanged():
    cap = 8
    dest = BoundedVector(cap)
    src = BoundedVector(cap)
    for i in range(cap - cap // 4):
        dest.append(i)
    src.append("extra")
    with pytest.raises(VectorError):
        dest.extend(src)
    assert len(dest) == cap - cap // 4


def test_invalid_capacity():
    with pytest.raises(ValueError):
        BoundedVector(0)


def test_concurrent_appends():
    v = BoundedVector(400)
    def worker(base):
        for i in range(50):
            v.append(base + i)
    threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    expected = {n * 100 + i for n in range(4) for i in range(50)}
    assert set(v) == expected
    assert len(v) == len(expected)