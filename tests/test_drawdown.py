import pytest

from warpdrive_weaver.dimensions import DimensionPolicy, DraftDimensions
from warpdrive_weaver.drawdown import compute_drawdown, update_drawdown
from warpdrive_weaver.editor import apply_edit
from warpdrive_weaver.models.draft import Draft
from warpdrive_weaver.models.edits import ThreadingEdit, TieupEdit, TreadlingEdit


def _draft(**sections) -> Draft:
    return Draft(sections={"wif": {"version": 1.1}, **sections})


def _twill_cells() -> set[tuple[int, int]]:
    cells = set()
    for pick in range(1, 9):
        treadle = (pick - 1) % 4 + 1
        lifted = {treadle, treadle % 4 + 1}
        for thread in range(1, 9):
            if (thread - 1) % 4 + 1 in lifted:
                cells.add((pick, thread))
    return cells


def test_single_cell_scenario():
    draft = _draft(
        weaving={"shafts": 4, "treadles": 4},
        warp={"threads": 1},
        weft={"threads": 1},
        threading={"1": 4},
        tieup={"1": [4]},
        treadling={"1": 1},
    )
    drawdown = compute_drawdown(draft)
    assert drawdown.cells == {(1, 1)}


def test_twill_drawdown(twill_draft):
    drawdown = compute_drawdown(twill_draft)

    assert drawdown.cells == _twill_cells()
    assert drawdown.dimensions == DraftDimensions(shafts=4, treadles=4, warp_threads=8, weft_threads=8)
    assert drawdown.is_filled(1, 1)
    assert not drawdown.is_filled(1, 3)
    assert not drawdown.is_filled(0, 1)
    assert not drawdown.is_filled(9, 1)


def test_drawdown_is_deterministic(twill_draft):
    assert compute_drawdown(twill_draft) == compute_drawdown(twill_draft)


def test_rows_are_pick_major_with_thread_one_first(twill_draft):
    rows = compute_drawdown(twill_draft).rows()
    assert len(rows) == 8
    assert rows[0] == [True, True, False, False, True, True, False, False]
    assert rows[1] == [False, True, True, False, False, True, True, False]


def test_missing_pattern_data_leaves_cells_empty():
    draft = _draft(
        weaving={"shafts": 4, "treadles": 4},
        warp={"threads": 4},
        weft={"threads": 4},
        threading={"1": 1, "2": 2, "4": 1},
        tieup={"1": [1], "2": []},
        treadling={"1": 1, "2": 2, "4": 3},
    )
    drawdown = compute_drawdown(draft)
    # pick 2 uses an empty treadle, pick 3 has no treadle, pick 4's treadle is not tied
    assert drawdown.cells == {(1, 1), (1, 4)}


def test_entries_outside_the_draft_are_ignored():
    draft = _draft(
        weaving={"shafts": 2, "treadles": 2},
        warp={"threads": 2},
        weft={"threads": 2},
        threading={"1": 1, "2": 3, "3": 1, "x": 1},
        tieup={"1": [1, 3], "5": [1]},
        treadling={"1": 1, "2": 5, "3": 1},
    )
    assert compute_drawdown(draft).cells == {(1, 1)}


def test_empty_draft_has_empty_drawdown():
    drawdown = compute_drawdown(_draft())
    assert drawdown.cells == frozenset()
    assert len(drawdown.rows()) == 20


@pytest.mark.parametrize(
    "edit",
    [
        ThreadingEdit(thread=3, shaft=1),
        ThreadingEdit(thread=3, shaft=None),
        TreadlingEdit(pick=2, treadle=4),
        TreadlingEdit(pick=2, treadle=None),
        TieupEdit(treadle=1, shaft=3, selected=True),
        TieupEdit(treadle=4, shaft=4, selected=False),
    ],
)
def test_incremental_update_matches_full_recompute(twill_draft, edit):
    previous = compute_drawdown(twill_draft)
    edited = apply_edit(twill_draft, edit)

    assert update_drawdown(previous, edited, edit) == compute_drawdown(edited)


def test_incremental_update_recomputes_everything_when_dimensions_change():
    policy = DimensionPolicy.pattern
    draft = _draft(
        weaving={"shafts": 2, "treadles": 2},
        threading={"1": 1, "2": 2},
        tieup={"1": [1]},
        treadling={"1": 1},
    )
    previous = compute_drawdown(draft, policy=policy)
    edit = ThreadingEdit(thread=2, shaft=None)
    edited = apply_edit(draft, edit, policy=policy)

    updated = update_drawdown(previous, edited, edit, policy=policy)
    assert updated.dimensions.warp_threads == 1
    assert updated == compute_drawdown(edited, policy=policy)
