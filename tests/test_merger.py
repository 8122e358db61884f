from __future__ import annotations

from typing import List

import pytest

from xmlmerge_tool.merger import merge_elements
from xmlmerge_tool.nodes import Container, Element
from xmlmerge_tool.trivia import leading_trivia

from tests.conftest import comment, el, indented, key_of, keys, render, ws


class _CountingElement(Element):
    calls = 0

    def deep_equals(self, other: Element) -> bool:
        type(self).calls += 1
        return super().deep_equals(other)


def test_empty_container_gets_sorted_new_elements() -> None:
    cont = Container([])
    assert merge_elements(cont, [el("b"), el("a")], key_of) is True
    assert keys(cont) == ["a", "b"]
    # No whitespace to copy from, so nothing between them.
    assert render(cont) == "<a><b>"


def test_insert_between_copies_neighbour_whitespace() -> None:
    cont = indented(el("a"), el("c"))
    assert merge_elements(cont, [el("b")], key_of) is True
    assert render(cont) == "\n  <a>\n  <b>\n  <c>\n"


def test_equal_replacement_is_not_a_change() -> None:
    cont = indented(el("a", 1), el("b"))
    new_a = el("a", 1)
    assert merge_elements(cont, [new_a], key_of) is False
    assert render(cont) == "\n  <a=1>\n  <b>\n"
    # The new element still takes the old one's place.
    assert cont.elements()[0] is new_a


def test_unsorted_container_is_resorted() -> None:
    cont = indented(el("b"), el("a"))
    assert merge_elements(cont, [], key_of) is True
    assert render(cont) == "\n  <a>\n  <b>\n"


def test_identical_merge_leaves_container_untouched() -> None:
    cont = indented(el("a"), el("b"), el("c"))
    before = render(cont)
    trivia_before = [n for n in cont if not isinstance(n, Element)]

    assert merge_elements(cont, [el("a"), el("b"), el("c")], key_of) is False
    assert render(cont) == before
    assert [n for n in cont if not isinstance(n, Element)] == trivia_before


def test_changed_replacement_content() -> None:
    cont = indented(el("a", 1), el("b"))
    assert merge_elements(cont, [el("a", 2)], key_of) is True
    assert render(cont) == "\n  <a=2>\n  <b>\n"


def test_insert_keeps_comment_with_following_element() -> None:
    cont = Container([ws(), el("a"), ws(), comment(" about c "), ws(), el("c"), ws("\n")])
    assert merge_elements(cont, [el("b")], key_of) is True
    assert render(cont) == "\n  <a>\n  <b>\n  # about c \n  <c>\n"


def test_several_inserts_before_first_element() -> None:
    cont = indented(el("d"))
    assert merge_elements(cont, [el("c"), el("a"), el("b")], key_of) is True
    assert render(cont) == "\n  <a>\n  <b>\n  <c>\n  <d>\n"


def test_trailing_inserts_go_before_closing_trivia() -> None:
    cont = Container([ws(), el("a"), ws(), comment("end"), ws("\n")])
    assert merge_elements(cont, [el("z"), el("y")], key_of) is True
    assert render(cont) == "\n  <a>\n  <y>\n  <z>\n  #end\n"


def test_trivia_only_container_appends_without_separator() -> None:
    cont = Container([ws("\n"), comment(" empty ")])
    assert merge_elements(cont, [el("b"), el("a")], key_of) is True
    assert render(cont) == "\n# empty <a><b>"


def test_no_whitespace_around_existing_element() -> None:
    cont = Container([el("c")])
    assert merge_elements(cont, [el("a"), el("d")], key_of) is True
    assert render(cont) == "<a><c><d>"


def test_deep_compare_skipped_once_changed() -> None:
    _CountingElement.calls = 0
    cont = indented(_CountingElement(("a", None)), el("b"))
    assert merge_elements(cont, [el("0"), el("a")], key_of) is True
    assert _CountingElement.calls == 0

    cont = indented(_CountingElement(("a", None)), el("b"))
    assert merge_elements(cont, [el("a")], key_of) is False
    assert _CountingElement.calls == 1


def test_unsorted_container_with_new_elements() -> None:
    cont = indented(el("c"), el("a"))
    assert merge_elements(cont, [el("b")], key_of) is True
    assert render(cont) == "\n  <a>\n  <b>\n  <c>\n"


def test_resort_keeps_leading_and_trailing_trivia() -> None:
    cont = Container(
        [ws(), comment("b-note"), ws(), el("b"), ws(), el("a"), ws(), comment("tail"), ws("\n")]
    )
    assert merge_elements(cont, [], key_of) is True
    assert render(cont) == "\n  <a>\n  #b-note\n  <b>\n  #tail\n"


def test_resort_discards_work_from_the_aborted_pass() -> None:
    cont = indented(el("b"), el("a"))
    assert merge_elements(cont, [el("a", 2), el("b", 2)], key_of) is True
    assert render(cont) == "\n  <a=2>\n  <b=2>\n"
    assert len(cont) == 5


def test_resort_is_stable_for_equal_keys() -> None:
    cont = indented(el("b"), el("a", 1), el("a", 2))
    assert merge_elements(cont, [], key_of) is True
    assert [e.content for e in cont.elements()] == [("a", 1), ("a", 2), ("b", None)]


def test_duplicate_new_keys_do_not_crash() -> None:
    cont = indented(el("a"))
    merge_elements(cont, [el("b", 1), el("b", 2)], key_of)
    assert keys(cont) == ["a", "b", "b"]


def test_keys_compare_by_code_point() -> None:
    cont = indented(el("a"))
    assert merge_elements(cont, [el("B"), el("é"), el("Z")], key_of) is True
    # Uppercase before lowercase, accented after ASCII.
    assert keys(cont) == ["B", "Z", "a", "é"]


_CASES = [
    ([], ["b", "a"]),
    (["a", "c", "e"], ["b", "d", "f"]),
    (["b", "d"], ["a", "b", "c", "d", "e"]),
    (["d", "c", "b", "a"], ["b", "x"]),
    (["a", "b", "c"], []),
    (["m"], ["A", "a", "Z", "z", "é"]),
]


def _new(new_keys: List[str]) -> List[Element]:
    return [el(k, "new") for k in new_keys]


@pytest.mark.parametrize("existing,new_keys", _CASES)
def test_merge_properties(existing: List[str], new_keys: List[str]) -> None:
    old = [el(k, "old") for k in existing]
    cont = indented(*old)
    old_trivia = {id(e): leading_trivia(cont, e) for e in old}

    merge_elements(cont, _new(new_keys), key_of)

    result = keys(cont)
    # sorted
    assert all(left <= right for left, right in zip(result, result[1:]))
    # every new key present once, with the new content
    for k in new_keys:
        matches = [e for e in cont.elements() if key_of(e) == k]
        assert len(matches) == 1
        assert matches[0].content == (k, "new")
    # untouched elements survive with their leading trivia
    preserved = [e for e in old if key_of(e) not in new_keys]
    in_container = [e for e in cont.elements() if any(e is p for p in preserved)]
    assert len(in_container) == len(preserved)
    for e in preserved:
        after = leading_trivia(cont, e)
        assert len(after) == len(old_trivia[id(e)])
        assert all(a is b for a, b in zip(after, old_trivia[id(e)]))


@pytest.mark.parametrize("existing,new_keys", _CASES)
def test_second_merge_is_a_no_op(existing: List[str], new_keys: List[str]) -> None:
    cont = indented(*[el(k, "old") for k in existing])
    merge_elements(cont, _new(new_keys), key_of)
    first = render(cont)

    assert merge_elements(cont, _new(new_keys), key_of) is False
    assert render(cont) == first


def _position(cont: Container, node: Element) -> int:
    return next(i for i, n in enumerate(cont.nodes) if n is node)


def test_trivia_after_preserved_elements_survives_middle_insert() -> None:
    a, c = el("a"), el("c")
    between = [ws(), comment(" c notes "), ws()]
    closing = [ws(), comment("end"), ws("\n")]
    cont = Container([ws(), a, *between, c, *closing])

    assert merge_elements(cont, [el("b")], key_of) is True
    assert render(cont) == "\n  <a>\n  <b>\n  # c notes \n  <c>\n  #end\n"

    i_a, i_c = _position(cont, a), _position(cont, c)
    # The run between a and c stays in one piece, directly above c.
    assert all(x is y for x, y in zip(cont.nodes[i_c - 3 : i_c], between))
    # The closing run still follows the last element.
    assert len(cont.nodes) == i_c + 1 + len(closing)
    assert all(x is y for x, y in zip(cont.nodes[i_c + 1 :], closing))
    # a is followed by a fresh copy of the same whitespace.
    after_a = cont.nodes[i_a + 1]
    assert after_a is not between[0]
    assert after_a.text == between[0].text


class _NoLookupContainer(Container):
    def index(self, node):
        raise AssertionError(f"identity lookup of {node!r}")


def test_sorted_merge_tracks_positions_without_lookups() -> None:
    cont = _NoLookupContainer(indented(el("b"), comment(" d "), el("d"), el("f")).nodes)
    new = [el("g"), el("a"), el("d", 2), el("e"), el("c")]

    assert merge_elements(cont, new, key_of) is True
    assert render(cont) == "\n  <a>\n  <b>\n  <c>\n  # d \n  <d=2>\n  <e>\n  <f>\n  <g>\n"


def test_replacing_every_element_of_a_large_container() -> None:
    names = [f"k{i:05d}" for i in range(2000)]
    cont = _NoLookupContainer(indented(*[el(k, "old") for k in names]).nodes)

    assert merge_elements(cont, [el(k, "new") for k in names], key_of) is True
    assert len(cont) == 2 * len(names) + 1
    assert all(e.content[1] == "new" for e in cont.elements())
