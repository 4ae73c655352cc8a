import pytest
from rootstep.engine import bisection, solve, resolve_method, Bisection
from rootstep.errors import ErrorReason, PreconditionError
from rootstep.numfmt import equal_to_places, equal_to_significant

def test_cubic_converges_to_three_places():
    res = bisection("x^3 - 3x + 1", "0", "1", "decimal_places", 3)
    assert res.ok
    assert len(res.trace) == 12
    assert res.root == "0.3474"
    assert res.steps[-2].c == "0.3472"
    assert equal_to_places(res.steps[-1].c, res.steps[-2].c, 3)

def test_first_steps():
    res = bisection("x^3 - 3x + 1", "0", "1", "1", "3")
    first, second = res.steps[0], res.steps[1]
    assert first.row() == ("1", "0", "+", "1", "-", "0.5", "-")
    assert second.row() == ("2", "0", "+", "0.5", "-", "0.25", "+")
    # 0.34375 rounds half to even at 4 places
    assert res.steps[4].c == "0.3438"

def test_bracket_and_sign_invariants():
    res = bisection("x^3 - 3x + 1", "0", "1", "decimal_places", 3)
    steps = res.steps
    for s in steps:
        assert s.sign_fa != s.sign_fb
        assert min(float(s.a), float(s.b)) < float(s.c) < max(float(s.a), float(s.b))
    for cur, nxt in zip(steps, steps[1:]):
        assert cur.c in (nxt.a, nxt.b)
        if nxt.a == cur.c:
            assert nxt.b == cur.b
        else:
            assert nxt.a == cur.a

@pytest.mark.parametrize("fx,lower,upper,policy,n", [
    ("x^3 - 2 sin(x)", "0.5", "2", "significant_digits", 5),
    ("x*e^x - 1", "0", "1", "decimal_places", 3),
    ("e^x - x - 2", "1", "2", "significant_digits", 4),
    ("sin(x) - 2x + 1", "0", "1", "decimal_places", 4),
    ("log(x) - cos(x)", "1", "2", "decimal_places", 3),
])
def test_worked_examples_converge(fx, lower, upper, policy, n):
    res = bisection(fx, lower, upper, policy, n)
    assert res.ok, res.trace.log_text
    assert len(res.trace) >= 2

def test_x_exp_root_is_close():
    res = bisection("x*e^x - 1", "0", "1", "decimal_places", 3)
    assert abs(float(res.root) - 0.5671) < 0.002

def test_step_count_includes_one():
    assert len(bisection("x^3 - 3x + 1", "0", "1", "no_of_steps", 1).trace) == 1
    res = bisection("x^3 - 3x + 1", "0", "1", "no_of_steps", 7)
    assert res.ok and len(res.trace) == 7

def test_same_sign_is_precondition_failure():
    res = bisection("x^2 + 1", "0", "1", "decimal_places", 3)
    assert not res.ok
    assert res.error_kind is ErrorReason.PRECONDITION
    assert len(res.trace) == 0
    assert "both" in res.trace.log_text
    with pytest.raises(PreconditionError):
        res.raise_for_error()

def test_parse_failure():
    res = bisection("x^^", "0", "1", "decimal_places", 3)
    assert res.error_kind is ErrorReason.EXPR_PARSE
    assert "parse error" in res.trace.log_text

def test_undefined_endpoint_is_input_error():
    res = bisection("log(x)", "-1", "2", "decimal_places", 3)
    assert res.error_kind is ErrorReason.INPUT
    res = bisection("x - 1", "abc", "2", "decimal_places", 3)
    assert res.error_kind is ErrorReason.INPUT

def test_constant_endpoints():
    res = bisection("cos(x)", "0", "pi", "decimal_places", 2)
    assert res.ok
    assert abs(float(res.root) - 1.5708) < 0.01

def test_step_limit_keeps_partial_trace():
    res = bisection("x^3 - 3x + 1", "0", "1", "decimal_places", 3, max_steps=5)
    assert not res.ok
    assert res.error_kind is ErrorReason.STEP_LIMIT
    assert len(res.trace) == 5

def test_dispatch_by_number():
    a = solve("1", "x^3 - 3x + 1", "0", "1", "1", 3)
    b = bisection("x^3 - 3x + 1", "0", "1", "decimal_places", 3)
    assert [s.row() for s in a.steps] == [s.row() for s in b.steps]
    assert resolve_method("Bisection") is Bisection
    with pytest.raises(ValueError):
        resolve_method("newton")
    with pytest.raises(ValueError):
        solve("bisection", "x", "0", "1", "decimal_places", 3, max_steps=0)

def test_result_to_dict():
    d = bisection("x^3 - 3x + 1", "0", "1", "decimal_places", 3).to_dict()
    assert d["ok"] is True
    assert d["policy"] == {"kind": "decimal_places", "n": 3}
    assert d["steps"][0]["c"] == "0.5"
    assert d["error_kind"] is None

def test_midpoint_on_exact_root_counts_as_positive():
    res = bisection("x - 0.1", "-0.3", "0.5", "decimal_places", 3)
    assert res.steps[0].row() == ("1", "-0.3", "-", "0.5", "+", "0.1", "+")
    # c had sign '+' and f(a) is '-', so b moves onto the root
    assert res.steps[1].b == "0.1"
    assert res.ok
    assert abs(float(res.root) - 0.1) < 0.001

def test_integral_midpoint_on_root():
    res = bisection("x - 2", "1", "3", "decimal_places", 3)
    assert res.steps[0].row() == ("1", "1", "-", "3", "+", "2", "+")
    assert res.ok
    assert abs(float(res.root) - 2) < 0.001

def test_significant_digit_scenarios_converge_near_root():
    res = bisection("x^3 - 2 sin(x)", "0.5", "2", "significant_digits", 5)
    assert res.ok
    assert equal_to_significant(res.steps[-1].c, res.steps[-2].c, 5)
    assert abs(float(res.root) - 1.236) < 0.002

    res = bisection("e^x - x - 2", "1", "2", "significant_digits", 4)
    assert res.ok
    assert equal_to_significant(res.steps[-1].c, res.steps[-2].c, 4)
    assert abs(float(res.root) - 1.146) < 0.002
