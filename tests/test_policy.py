import pytest
from rootstep.policy import PolicyKind, TerminationPolicy

def test_parse_names_and_numbers():
    assert PolicyKind.parse("1") is PolicyKind.DECIMAL_PLACES
    assert PolicyKind.parse("significant_digits") is PolicyKind.SIGNIFICANT_DIGITS
    assert PolicyKind.parse(" No_Of_Steps ") is PolicyKind.NO_OF_STEPS
    with pytest.raises(ValueError):
        PolicyKind.parse("bogus")

def test_parameter_validation():
    with pytest.raises(ValueError):
        TerminationPolicy.step_count(0)
    with pytest.raises(ValueError):
        TerminationPolicy.decimal_places(-1)
    with pytest.raises(ValueError):
        TerminationPolicy.of("1", "three")
    assert TerminationPolicy.of("3", "5") == TerminationPolicy.step_count(5)
    assert TerminationPolicy.decimal_places(0).n == 0

def test_rounding_schedule():
    assert TerminationPolicy.decimal_places(3).round("0.347296") == "0.3473"
    assert TerminationPolicy.significant_digits(2).round("0.347296") == "0.347"
    assert TerminationPolicy.step_count(5).round("0.12345678") == "0.123457"

def test_stop_predicate():
    steps = TerminationPolicy.step_count(3)
    assert not steps.satisfied(2, "0.1", "0.2")
    assert steps.satisfied(3, "0.1", None)

    places = TerminationPolicy.decimal_places(3)
    assert not places.satisfied(1, "0.3474", None)
    assert places.satisfied(2, "0.3474", "0.3472")
    assert not places.satisfied(2, "0.3474", "0.3482")

def test_describe():
    assert TerminationPolicy.significant_digits(5).describe() == "correct to 5 significant digits"
    assert TerminationPolicy.step_count(6).describe() == "6 steps"
