from Sudoku.grid import GridState
from Sudoku.solver import (
    BacktrackingSolver, SolveController, SolveOutcome, TechniqueRecord,
)
from Sudoku.techniques import Technique, SUBSET_TECHNIQUES, LOCKED_TECHNIQUES


def _clues_kept(state, givens):
    return all(v == 0 or state.to_values()[i] == v for i, v in enumerate(givens))


# -----------------------------------------------------------------------------
# Logical solving
# -----------------------------------------------------------------------------
def test_already_full_grid_solves_without_changes(full_grid):
    state = GridState.from_values(full_grid)
    result = SolveController(state).run_logical_solve()
    assert result.success
    assert result.outcome is SolveOutcome.SOLVED
    assert result.changes == 0
    assert result.passes == 1


def test_easy_puzzle_solves_with_singles_only(easy_givens, easy_solution):
    state = GridState.from_values(easy_givens)
    controller = SolveController(state, use_locked_candidates=False, use_subsets=False)
    result = controller.run_logical_solve()

    assert result.success
    assert result.remaining == 0
    assert state.validate()
    assert _clues_kept(state, easy_givens)
    assert state.to_digit_string() == easy_solution
    used = {record.technique for record in controller.history}
    assert not used & set(SUBSET_TECHNIQUES)
    assert not used & set(LOCKED_TECHNIQUES)


def test_easy_puzzle_with_all_techniques(easy_givens, easy_solution):
    state = GridState.from_values(easy_givens)
    controller = SolveController(state)
    result = controller.run_logical_solve()
    assert result.success
    assert state.to_digit_string() == easy_solution
    assert controller.stats['value_changes'] == 81 - sum(1 for v in easy_givens if v)
    assert controller.stats['passes'] == result.passes


def test_flags_are_settled_after_solving(easy_givens):
    state = GridState.from_values(easy_givens)
    SolveController(state).run_logical_solve()
    for name in GridState._ARRAYS[3:]:
        assert not getattr(state, name).any(), name


def test_hard_puzzle_stalls_then_search_solves(hard_givens, hard_solution):
    state = GridState.from_values(hard_givens)
    logical = SolveController(state).run_logical_solve()

    assert not logical.success
    assert logical.outcome is SolveOutcome.STALLED
    assert logical.remaining > 0
    assert state.validate()
    assert _clues_kept(state, hard_givens)

    search = BacktrackingSolver(state).solve()
    assert search.success
    assert search.remaining == 0
    assert state.validate()
    assert _clues_kept(state, hard_givens)
    assert state.to_digit_string() == hard_solution


def test_pass_limit(hard_givens):
    state = GridState.from_values(hard_givens)
    result = SolveController(state, max_passes=1).run_logical_solve()
    assert result.outcome is SolveOutcome.ITERATION_LIMIT
    assert result.passes == 1
    assert result.changes > 0


def test_duplicate_clues_are_never_reported_solved():
    givens = [0] * 81
    givens[0] = givens[1] = 5
    state = GridState.from_values(givens)
    assert not state.validate()
    result = SolveController(state).run_logical_solve()
    assert not result.success


def test_full_grid_with_duplicate_is_invalid(full_grid):
    bad = list(full_grid)
    bad[0] = bad[1]
    result = SolveController(GridState.from_values(bad)).run_logical_solve()
    assert not result.success
    assert result.outcome is SolveOutcome.INVALID


def test_solved_count_only_grows_and_grid_stays_valid(easy_givens):
    state = GridState.from_values(easy_givens)
    controller = SolveController(state)
    order = [Technique.ELIMINATE_BY_VALUE, Technique.SINGLE_POSSIBILITY,
             Technique.SINGLE_IN_COLUMN, Technique.SINGLE_IN_ROW, Technique.SINGLE_IN_BOX]

    solved = state.solved_count
    for _ in range(20):
        for tech in order:
            controller.run_technique(tech)
            assert state.solved_count >= solved
            assert state.validate()
            state.check_invariants()
            solved = state.solved_count
        if state.remaining() == 0:
            break
    assert state.remaining() == 0


def test_run_technique_with_size(easy_givens):
    state = GridState.from_values(easy_givens)
    controller = SolveController(state)
    controller.run_technique("eliminate_by_value")
    assert controller.run_technique("subsets_in_row", size=2) >= 0
    assert [r.technique for r in controller.history] == [
        Technique.ELIMINATE_BY_VALUE, Technique.SUBSETS_IN_ROW,
    ]


def test_history_and_totals(easy_givens):
    state = GridState.from_values(easy_givens)
    controller = SolveController(state)
    result = controller.run_logical_solve()

    first = controller.history[0]
    assert first.pass_index == 1
    assert first.technique is Technique.ELIMINATE_BY_VALUE
    assert first.changes > 0
    assert max(r.pass_index for r in controller.history) == result.passes

    totals = controller.technique_totals()
    assert sum(totals.values()) == result.changes
    assert totals[Technique.ELIMINATE_BY_VALUE] > 0


def test_record_format():
    record = TechniqueRecord(3, Technique.SINGLE_IN_ROW, 4)
    assert record.format() == "Single In Row              + 4"
    record = TechniqueRecord(3, Technique.ELIMINATE_BY_VALUE, 12)
    assert record.format().endswith("- 12")


def test_verbose_output(easy_givens, capsys):
    SolveController(GridState.from_values(easy_givens), verbose=True).run_logical_solve()
    out = capsys.readouterr().out
    assert "Iteration 1" in out
    assert "Remove by Value" in out
    assert "Success" in out


# -----------------------------------------------------------------------------
# Backtracking
# -----------------------------------------------------------------------------
def test_backtracking_from_scratch(easy_givens, easy_solution):
    state = GridState.from_values(easy_givens)
    solver = BacktrackingSolver(state)
    result = solver.solve()
    assert result.success
    assert state.to_digit_string() == easy_solution
    assert solver.solved_state is not None
    assert solver.stats['nodes'] > 0
    assert solver.stats['max_depth'] == result.changes


def test_backtracking_on_solved_grid(full_grid):
    state = GridState.from_values(full_grid)
    result = BacktrackingSolver(state).solve()
    assert result.success
    assert result.changes == 0


def test_backtracking_rejects_invalid_clues():
    givens = [0] * 81
    givens[0] = givens[9] = 4
    state = GridState.from_values(givens)
    before = state.clone()
    result = BacktrackingSolver(state).solve()
    assert result.outcome is SolveOutcome.INVALID
    assert state.remaining() == 79
    assert state == before


def test_backtracking_reports_unsolvable():
    # Row 1 needs a 9 in column 9, which already has one
    givens = [1, 2, 3, 4, 5, 6, 7, 8, 0] + [0] * 8 + [9] + [0] * 63
    state = GridState.from_values(givens)
    assert state.validate()
    before = state.to_values()

    result = BacktrackingSolver(state).solve()
    assert result.outcome is SolveOutcome.UNSOLVABLE
    assert not result.success
    assert state.to_values() == before


def test_backtracking_expired_deadline(hard_givens):
    state = GridState.from_values(hard_givens)
    result = BacktrackingSolver(state, timeout_seconds=-1).solve()
    assert result.outcome is SolveOutcome.TIMEOUT
    assert state.remaining() == 81 - sum(1 for v in hard_givens if v)


def test_controller_solve_recursive(hard_givens):
    state = GridState.from_values(hard_givens)
    controller = SolveController(state)
    controller.run_logical_solve()
    result = controller.solve_recursive()
    assert result.success
    assert state.is_solved()
    assert not state.value_changed.any()
    assert not state.prev_value_changed.any()


def test_zero_passes_is_a_limit(easy_givens):
    result = SolveController(GridState.from_values(easy_givens), max_passes=0).run_logical_solve()
    assert result.outcome is SolveOutcome.ITERATION_LIMIT
    assert result.passes == 0


def test_locked_candidates_unlock_a_single():
    state = GridState()
    for col in range(4, 10):
        state.clear_candidate(col, 1, 5, is_initial=True)
    for row in range(4, 10):
        state.clear_candidate(1, row, 5, is_initial=True)

    controller = SolveController(state)
    result = controller.run_logical_solve()
    assert state.get_value(1, 1) == 5
    assert result.outcome is SolveOutcome.STALLED

    assigned = [r for r in controller.history if r.technique.assigns and r.changes]
    locked = [r for r in controller.history if r.technique in LOCKED_TECHNIQUES and r.changes]
    assert assigned[0].pass_index == 2
    assert assigned[0].technique is Technique.SINGLE_IN_ROW
    assert locked[0].pass_index == 1
    assert controller.history.index(locked[0]) < controller.history.index(assigned[0])
    assert controller.technique_totals()[Technique.ROW_LOCKED_IN_BOX] == 6


# Needs locked candidates: singles alone stall with 44 cells open
LOCKED_PUZZLE = "100920000524010000000000070050008102000000000402700090060000000000030945000071006"
LOCKED_SOLUTION = "176923584524817639893654271957348162638192457412765398265489713781236945349571826"


def test_puzzle_needing_locked_candidates():
    givens = [int(ch) for ch in LOCKED_PUZZLE]

    singles = SolveController(GridState.from_values(givens),
                              use_locked_candidates=False, use_subsets=False).run_logical_solve()
    assert singles.outcome is SolveOutcome.STALLED
    assert singles.remaining == 44

    state = GridState.from_values(givens)
    controller = SolveController(state, use_subsets=False)
    result = controller.run_logical_solve()
    assert result.success
    assert state.to_digit_string() == LOCKED_SOLUTION

    history = controller.history
    first_locked = next(i for i, r in enumerate(history)
                        if r.technique in LOCKED_TECHNIQUES and r.changes)
    later = [r for r in history[first_locked:] if r.technique.assigns and r.changes]
    assert later
    assert later[0].pass_index >= history[first_locked].pass_index


def test_locked_techniques_run_in_pass_order(hard_givens):
    controller = SolveController(GridState.from_values(hard_givens), max_passes=1)
    controller.run_logical_solve()
    locked = [r.technique for r in controller.history if r.technique in LOCKED_TECHNIQUES]
    assert locked == [
        Technique.ROW_LOCKED_IN_BOX, Technique.COLUMN_LOCKED_IN_BOX,
        Technique.BOX_LOCKED_IN_COLUMN, Technique.BOX_LOCKED_IN_ROW,
    ]
